"""payment-lifecycle: payment records through a Pending → Confirmed lifecycle."""

__version__ = "0.1.0"
