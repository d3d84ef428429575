"""Administrative command line scripts."""
