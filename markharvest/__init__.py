"""markharvest - turn hyperlinks in free-form text into clean Markdown."""

__version__ = "0.1.0"
