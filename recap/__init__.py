"""
Core package for the conversation recap pipeline.

Speaker tracks are transcribed separately, merged into one conversation of
speaker turns, split into chunks that fit a language model request and
summarised.  The pure assembly and chunking steps live in
:mod:`recap.turn_assembler` and :mod:`recap.chunker`; the remaining modules
wrap the external services around them.
"""
