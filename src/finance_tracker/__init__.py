"""Personal finance ledger: installments, card statement cycles, legacy import."""

__version__ = "0.1.0"
