"""HTTP front end for file search."""
