"""
Complete grammars built with inkweave.

They don't add anything to the library. They're here to be used, and read as examples.
"""
