"""
Profile subsystem for tabflow.

A profile is the declarative description of one extraction job: the
ordered output columns, where each column's value comes from (a JSON
path, an HTML label, an HTML tag or a marker line in the body) and how
it is cleaned.  The global newline, null and delimiter settings live
next to the profiles in the same YAML document.
"""

from .schema import Column, Config, OutputPolicy, Profile  # noqa: F401
from .loader import load_config, parse_config, select_profile  # noqa: F401
