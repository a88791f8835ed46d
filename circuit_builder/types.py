"""
Typed data models for tool outputs.

Tool handlers build these and return them through dataclasses.asdict(),
so every payload that leaves the server has a fixed shape.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Validation ────────────────────────────────────────────────

@dataclass
class ValidationWarning:
    code: str
    severity: str
    message: str
    fix: str


# ── Purchasing ────────────────────────────────────────────────

@dataclass
class BOMItem:
    name: str
    quantity: int = 1
    part_number: Optional[str] = None

    @property
    def query_term(self) -> str:
        return self.part_number or self.name


@dataclass
class CartLink:
    vendor: str
    url: str


@dataclass
class ComponentListing:
    """One line of the component sidebar in the circuit builder preview."""
    name: str
    qty: int = 1
    purchase_url: str = ""


# ── Catalog ───────────────────────────────────────────────────

@dataclass
class CatalogEntry:
    name: str
    category: str
    mpn: str = ""
    voltage: str = ""
    keywords: list[str] = field(default_factory=list)
    purchase_url: str = ""
