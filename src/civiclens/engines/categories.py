"""
/**
 * @file categories.py
 * @summary The twelve issue categories used by the legislation and issues
 *          engines.
 */
"""

from typing import List
from pydantic import BaseModel, ConfigDict


class IssueCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    icon: str = ""


ISSUE_CATEGORIES: List[IssueCategory] = [
    IssueCategory(id="healthcare", label="Healthcare", icon="🏥"),
    IssueCategory(id="economy", label="Economy & Jobs", icon="💼"),
    IssueCategory(id="education", label="Education", icon="📚"),
    IssueCategory(id="environment", label="Environment & Climate", icon="🌍"),
    IssueCategory(id="defense", label="Defense & Security", icon="🛡️"),
    IssueCategory(id="immigration", label="Immigration", icon="🗽"),
    IssueCategory(id="civil-rights", label="Civil Rights", icon="⚖️"),
    IssueCategory(id="taxation", label="Taxation", icon="📊"),
    IssueCategory(id="infrastructure", label="Infrastructure", icon="🏗️"),
    IssueCategory(id="technology", label="Technology & Privacy", icon="💻"),
    IssueCategory(id="agriculture", label="Agriculture", icon="🌾"),
    IssueCategory(id="foreign-policy", label="Foreign Policy", icon="🌐"),
]

ISSUE_IDS: List[str] = [c.id for c in ISSUE_CATEGORIES]


def get_category(issue_id: str):
    return next((c for c in ISSUE_CATEGORIES if c.id == issue_id), None)
