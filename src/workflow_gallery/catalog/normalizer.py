"""Turn raw directory entries and aggregate records into WorkflowSummary objects."""

from __future__ import annotations

import re
from typing import Any

from .schema import Complexity, WorkflowSummary
from .vocabulary import (
    DEFAULT_CATEGORY,
    DEFAULT_TRIGGER,
    DEFAULT_VOCABULARY,
    ROOT_FOLDER,
    Vocabulary,
)

SUFFIX = ".json"

_NUMERIC_PREFIX = re.compile(r"^\d+[-_]")
_SEPARATORS = re.compile(r"[_\-]+")
_WHITESPACE = re.compile(r"\s+")

_N8N_NODE_PREFIXES = ("n8n-nodes-base.", "@n8n/n8n-nodes-langchain.")
# Node types that carry no integration of their own
_CORE_NODE_TYPES = frozenset({
    "set", "if", "switch", "merge", "code", "function", "functionitem", "noop",
    "stickynote", "splitinbatches", "wait", "itemlists", "filter", "start",
    "manual", "schedule", "cron", "interval", "webhook", "error", "form",
    "respondtowebhook", "executeworkflow",
})


def strip_suffix(filename: str, suffix: str = SUFFIX) -> str:
    if filename.lower().endswith(suffix):
        return filename[: -len(suffix)]
    return filename


def ensure_suffix(filename: str, suffix: str = SUFFIX) -> str:
    if filename.lower().endswith(suffix):
        return filename
    return f"{filename}{suffix}"


def derive_name(text: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> str:
    """Build a display name from a filename or title.

    "0007_Send_HTTP_Request.json" -> "Send HTTP Request"
    """
    stem = strip_suffix(text.strip())
    stem = _NUMERIC_PREFIX.sub("", stem, count=1)
    stem = _SEPARATORS.sub(" ", stem)
    stem = _WHITESPACE.sub(" ", stem).strip()
    return " ".join(vocabulary.render(token) for token in stem.split(" ") if token)


def infer_complexity(node_count: int) -> Complexity:
    if node_count <= 5:
        return "Low"
    if node_count <= 15:
        return "Medium"
    return "High"


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def _as_str_list(value: Any) -> list[str]:
    """Accept ["a", "b"], [{"name": "a"}], or "a, b" and return unique strings."""
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple, set)):
        return []
    out: list[str] = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("name")
        if isinstance(item, str) and item.strip() and item.strip() not in out:
            out.append(item.strip())
    return out


def _first_str(raw: dict, *keys: str) -> str | None:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def count_nodes(document: dict) -> int:
    nodes = document.get("nodes")
    return len(nodes) if isinstance(nodes, list) else 0


def count_connections(document: dict) -> int:
    connections = document.get("connections")
    return len(connections) if isinstance(connections, dict) else 0


def _node_service(node_type: str) -> str:
    for prefix in _N8N_NODE_PREFIXES:
        if node_type.startswith(prefix):
            return node_type[len(prefix):]
    return node_type.rsplit(".", 1)[-1]


def detect_integrations(document: dict, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> list[str]:
    """List the external services used by an n8n workflow's nodes."""
    found: list[str] = []
    for node in document.get("nodes") or []:
        if not isinstance(node, dict) or not isinstance(node.get("type"), str):
            continue
        service = _node_service(node["type"])
        service = re.sub(r"(Trigger|Tool)$", "", service)
        if not service or service.lower() in _CORE_NODE_TYPES:
            continue
        label = vocabulary.brands.get(service.lower()) or derive_name(
            re.sub(r"(?<=[a-z])(?=[A-Z])", " ", service), vocabulary
        )
        if label and label not in found:
            found.append(label)
    return found


def detect_trigger(document: dict) -> str:
    """Classify how a workflow starts, from its trigger node type."""
    for node in document.get("nodes") or []:
        if not isinstance(node, dict) or not isinstance(node.get("type"), str):
            continue
        node_type = node["type"].lower()
        if "webhook" in node_type:
            return "Webhook"
        if any(k in node_type for k in ("cron", "schedule", "interval")):
            return "Scheduled"
        if "manualtrigger" in node_type or node_type.endswith(".start"):
            return "Manual"
        if node_type.endswith("trigger"):
            return "Triggered"
    return DEFAULT_TRIGGER


def _filename_for(raw: dict) -> str | None:
    filename = _first_str(raw, "filename", "file", "file_name")
    if filename is None and raw.get("type") in (None, "file"):
        filename = _first_str(raw, "path")
        if filename is not None:
            filename = filename.rsplit("/", 1)[-1]
    if filename is None and raw.get("type") == "file":
        filename = _first_str(raw, "name")
    if filename is None:
        ident = raw.get("id")
        if isinstance(ident, (int, str)) and str(ident).strip():
            filename = str(ident).strip()
    if filename is None:
        title = _first_str(raw, "name", "title")
        if title is not None:
            filename = _WHITESPACE.sub("_", title)
    return ensure_suffix(filename) if filename else None


def normalize(
    raw: dict,
    folder: str = ROOT_FOLDER,
    source: str = "directory",
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> WorkflowSummary:
    """Convert one directory entry or aggregate record into a WorkflowSummary.

    Directory entries come from the GitHub contents API (``name``, ``path``,
    ``size``, ``html_url``, ``download_url``). Aggregate records may carry any
    of ``title``/``name``, ``filename``, ``id``, ``description``, ``tags``,
    ``category``, ``trigger_type``, ``complexity``, ``integrations``,
    ``active``, node counts, or an inline ``workflow`` document.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"Cannot normalize {type(raw).__name__}; expected an object")

    filename = _filename_for(raw) or "untitled.json"
    if source == "directory":
        title = filename
    else:
        title = _first_str(raw, "title", "name") or filename
    name = derive_name(title, vocabulary) or strip_suffix(filename)

    document = raw.get("workflow")
    if not isinstance(document, dict):
        document = raw if isinstance(raw.get("nodes"), list) else None

    if document is not None:
        nodes_count = count_nodes(document)
        connections_count = count_connections(document)
    else:
        nodes_count = _as_int(raw.get("nodes_count", raw.get("node_count", raw.get("nodeCount"))))
        connections_count = _as_int(raw.get("connections_count", raw.get("connectionCount")))

    complexity = raw.get("complexity")
    if isinstance(complexity, str) and complexity.capitalize() in ("Low", "Medium", "High"):
        complexity_value = complexity.capitalize()
        supplied = True
    else:
        complexity_value = infer_complexity(nodes_count)
        supplied = False

    integrations = _as_str_list(raw.get("integrations"))
    trigger = _first_str(raw, "trigger_type", "triggerType", "trigger")
    if document is not None:
        integrations = integrations or detect_integrations(document, vocabulary)
        trigger = trigger or detect_trigger(document)

    active = raw.get("active")
    path = _first_str(raw, "path") or ""

    return WorkflowSummary(
        name=name,
        filename=filename,
        folder=_first_str(raw, "folder") or folder or ROOT_FOLDER,
        path=path,
        size=_as_int(raw.get("size")),
        url=_first_str(raw, "html_url", "url"),
        download_url=_first_str(raw, "download_url", "raw_url"),
        workflow=document if source == "aggregate" and document is not None else None,
        nodes_count=nodes_count,
        connections_count=connections_count,
        description=_first_str(raw, "description") or "",
        tags=_as_str_list(raw.get("tags")),
        category=_first_str(raw, "category") or DEFAULT_CATEGORY,
        trigger_type=trigger or DEFAULT_TRIGGER,
        complexity=complexity_value,
        complexity_supplied=supplied,
        integrations=integrations,
        active=active if isinstance(active, bool) else True,
        source=source,
        created_at=_first_str(raw, "created_at", "createdAt"),
        updated_at=_first_str(raw, "updated_at", "updatedAt"),
    )


def apply_workflow_document(
    summary: WorkflowSummary,
    document: Any,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> WorkflowSummary:
    """Attach a fetched workflow document to a summary, in place."""
    if not isinstance(document, dict):
        summary.description = summary.description or "Workflow content is not a JSON object"
        return summary

    summary.workflow = document
    summary.nodes_count = count_nodes(document)
    summary.connections_count = count_connections(document)
    described = _first_str(document, "description")
    if described:
        summary.description = described
    elif not summary.description:
        summary.description = f"{summary.nodes_count} nodes, {summary.connections_count} connections"
    if not summary.integrations:
        summary.integrations = detect_integrations(document, vocabulary)
    if summary.trigger_type == DEFAULT_TRIGGER:
        summary.trigger_type = detect_trigger(document)
    if not summary.tags:
        summary.tags = _as_str_list(document.get("tags"))
    if not summary.complexity_supplied:
        summary.complexity = infer_complexity(summary.nodes_count)
    return summary


def degrade(summary: WorkflowSummary, reason: str) -> WorkflowSummary:
    """Mark a summary whose content could not be loaded."""
    summary.description = f"Could not load workflow content: {reason}"
    return summary
