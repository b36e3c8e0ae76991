"""matlab-beautifier: canonical formatting for MATLAB source code."""

__version__ = "0.1.0"
