"""Library code for IIIF publishing."""
