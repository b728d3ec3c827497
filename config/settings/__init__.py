"""Settings package for the availability engine.

`base.py` contains configuration shared across environments. The
`dev.py`, `prod.py` and `test.py` modules extend it with environment
specific overrides.
"""
