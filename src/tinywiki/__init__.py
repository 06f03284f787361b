"""TinyWiki: a small Markdown wiki backed by a relational database."""
