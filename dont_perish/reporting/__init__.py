"""
Reporting: terminal formatters and file exports.

Modules
-------
export     : generic CSV / JSON writers + row adapters for engine outputs.
formatters : ASCII tables for the CLI.
reporter   : writes the per-run CSV / JSON files.
"""
