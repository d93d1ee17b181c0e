"""BLS course results importer.

Reconciles bulk pre-test / post-test results (CSV or XLSX) against the
participant directory and records them as test submissions.
"""

__version__ = "0.1.0"
