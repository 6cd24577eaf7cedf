"""
Intentionally empty.

pytest puts the directory of a rootdir conftest.py on sys.path (default
"prepend" import mode), which lets tests import `dropin` from a plain
checkout without `pip install -e .`.
"""
