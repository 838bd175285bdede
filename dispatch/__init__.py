#Expose the courier-facing pipeline pieces:
#Order lifecycle transitions (forward-only state machine)
#Proof of delivery capture (signature pad + recorder)
#Dispatch session orchestrator (the "one object" the presentation layer drives)

from .state_machines.order_state import advance, OrderStateException
from .signature_capture import SignaturePad, SignatureCapture, SignatureImage, SignatureRequired
from .session import DispatchSession, SessionView, SessionResult, RouteSummary

__all__ = [
    "advance",
    "OrderStateException",
    "SignaturePad",
    "SignatureCapture",
    "SignatureImage",
    "SignatureRequired",
    "DispatchSession",
    "SessionView",
    "SessionResult",
    "RouteSummary",
]
