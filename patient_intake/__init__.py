"""Patient intake pipeline: validate, normalize and summarize patient records."""
