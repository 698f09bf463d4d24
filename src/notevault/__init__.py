"""NoteVault - note sharing backend with asynchronous PDF watermarking."""

__version__ = "0.1.0"
