"""Commands for the glrelease CLI: check, in and out."""
