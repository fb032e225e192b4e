"""PDF assembly building blocks: models, handlers, colour conversion, finishing."""
