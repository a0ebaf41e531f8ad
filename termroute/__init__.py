"""Route text to the terminal session running a target application.

Searches the descendant process tree of each open terminal session for a
command line naming one of the configured applications, and delivers a
line of text to the first session that has one.
"""

__version__ = "0.1.0"
