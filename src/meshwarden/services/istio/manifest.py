"""Helpers for splitting a rendered Istio chart manifest."""

import yaml

from meshwarden.core.exceptions import IstioError

ISTIO_OPERATOR_KIND = "IstioOperator"


def _load_documents(manifest: str) -> list[dict]:
    try:
        return [doc for doc in yaml.safe_load_all(manifest) if doc]
    except yaml.YAMLError as e:
        raise IstioError(f"Invalid Istio manifest: {e}") from e


def extract_istio_operator(manifest: str) -> str:
    """Get the IstioOperator resource from a rendered manifest.

    Args:
        manifest: Multi-document YAML manifest

    Returns:
        IstioOperator resource as YAML

    Raises:
        IstioError: If the manifest is invalid or has no IstioOperator
    """
    for doc in _load_documents(manifest):
        if doc.get("kind") == ISTIO_OPERATOR_KIND:
            return yaml.safe_dump(doc, sort_keys=False)

    raise IstioError("IstioOperator definition could not be found in the manifest")


def without_istio_operator(manifest: str) -> str:
    """Get every resource of a rendered manifest except the IstioOperator.

    Args:
        manifest: Multi-document YAML manifest

    Returns:
        Remaining resources as multi-document YAML (empty for an empty manifest)
    """
    documents = [doc for doc in _load_documents(manifest) if doc.get("kind") != ISTIO_OPERATOR_KIND]
    if not documents:
        return ""
    return yaml.safe_dump_all(documents, sort_keys=False)
