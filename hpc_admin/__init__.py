"""Command-line tools for HPC systems administration.

- query-job-endtime: Grid Engine job end times from h_rt requests
- query-dell-st: Dell service tag warranty lookup
- rand-passwd: random password generator
"""

__version__ = "1.2.0"
