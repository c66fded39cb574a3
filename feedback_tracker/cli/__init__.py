"""CLI tools for the feedback tracker.

- ``python -m feedback_tracker.cli`` - list, add, vote on, delete and
  summarize stored feedback without running the web server.

Uses argparse; imports of the web application are deferred inside
functions so ``--help`` stays fast.
"""
