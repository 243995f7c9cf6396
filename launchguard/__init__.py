"""
LaunchGuard.
Runs a single application on an e-paper tablet, shows a status screen while
it runs and kills it on a quit gesture or a termination signal.
"""

__version__ = "0.3.0"
