"""Present an embedded-browser host under its own name in the volume mixer."""
