"""Human-readable explanations of authorization results."""
from __future__ import annotations

from provision_github_tokens.explain.provision_text import ProvisionAuthExplainer
from provision_github_tokens.explain.renderer import ResultRenderer
from provision_github_tokens.explain.token_text import TokenAuthExplainer

__all__ = ["ProvisionAuthExplainer", "ResultRenderer", "TokenAuthExplainer"]
