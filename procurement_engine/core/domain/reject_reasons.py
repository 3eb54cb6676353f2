"""Refusal kinds and operator-facing reason texts.

A refused decision carries one ``RejectKind`` code (stable, for callers and
metrics) and one human-readable reason (shown as-is to the operator).
"""

from __future__ import annotations


class RejectKind:
    """Why an action was refused."""

    # Forbidden by the basket's current lifecycle phase.
    POLICY_VIOLATION = "POLICY_VIOLATION"
    # Would leave a demand with no active basket carrying it.
    MISSING_ALTERNATIVE = "MISSING_ALTERNATIVE"
    # No rule is defined for the requested (current, target) pair.
    UNSUPPORTED_TRANSITION = "UNSUPPORTED_TRANSITION"
    # A correlation key is missing, so the action cannot be evaluated safely.
    MALFORMED_INPUT = "MALFORMED_INPUT"
    # The basket status did not normalize to a known phase.
    UNKNOWN_STATUS = "UNKNOWN_STATUS"

    ALL: frozenset[str] = frozenset(
        {
            POLICY_VIOLATION,
            MISSING_ALTERNATIVE,
            UNSUPPORTED_TRANSITION,
            MALFORMED_INPUT,
            UNKNOWN_STATUS,
        }
    )


class ReasonText:
    """Reason strings surfaced to operators."""

    POOLING_ALL_SELECTED = "En mutualisation, tous les items sont automatiquement sélectionnés"
    POOLING_NO_DESELECT = "La désélection est interdite en mutualisation"
    POOLING_NO_PURGE = "Aucune purge possible en mutualisation"
    LOCKED_ITEMS = "Les items sont verrouillés dans un panier commandé ou clôturé"
    LOCKED_NO_PURGE = "Impossible de purger un panier commandé ou clôturé"
    SENT_NO_PURGE = "En statut envoyé, les items désélectionnés restent visibles"
    UNKNOWN_STATUS = "Statut de panier inconnu"
    MISSING_UID = "Item sans UID de demande d'achat"
    NO_ALTERNATIVE = (
        "Impossible de désélectionner : aucun autre panier actif ne contient cette demande d'achat"
    )
    ALL_ITEMS_VALIDATED = "Tous les items sont validés"
    NO_SELECTED_LINE = (
        "Aucune ligne sélectionnée. Veuillez sélectionner au moins un article "
        "avant de passer la commande."
    )
    NOT_ORDERED = "Seul un panier commandé peut être réceptionné"

    @staticmethod
    def orphaned_on_send(count: int) -> str:
        return f"{count} item(s) désélectionné(s) sans alternative dans un autre panier"

    @staticmethod
    def orphaned_on_order(count: int) -> str:
        return (
            f"{count} item(s) désélectionné(s) sans alternative valide. "
            "Impossible de passer en commandé."
        )

    @staticmethod
    def unsupported_transition(current: str, target: str) -> str:
        return f"Transition {current} → {target} non supportée"
