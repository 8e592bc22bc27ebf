"""
transadif core library.

This package contains the core functionality:
- codec: encoding registry, detection, length resolution, mojibake
  correction, entity expansion and transcoding
- adif: ADIF tokenizer, document pipeline and writer
"""

__all__: list[str] = []
