"""Find figure references and reference numerals in DOCX text and drawing pages."""

__version__ = "0.1.0"