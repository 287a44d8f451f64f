"""
Module: report.errors

Purpose:
    Exceptions raised while assembling a report.

Key Classes:
    - ReportError: Report assembly failed
    - FormulaMismatchError: A formula and its fallback value disagree
"""


class ReportError(Exception):
    """Error during report assembly."""
    pass


class FormulaMismatchError(ReportError):
    """
    A derived cell's formula does not evaluate to its fallback value.

    This is an internal consistency violation: emitting the cell would
    corrupt the exported artifact, so construction fails loudly instead.
    """

    def __init__(self, message: str, address: str = "", formula: str = ""):
        super().__init__(message)
        self.address = address
        self.formula = formula
