"""KH Recipes. A personal recipe box.

The whole collection lives in one JSON document. The server only ever reads
or overwrites that document, and hands free text to a language model to get a
structured recipe back.

The client keeps a local copy and pushes the full document on every change.
Last write wins. There is one user, so nobody else is racing to write.
"""
