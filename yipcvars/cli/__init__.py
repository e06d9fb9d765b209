"""yipcvars command-line interface."""
