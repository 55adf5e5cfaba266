"""
MCP Advisor - Discovery and recommendation of MCP servers across search backends.

Example:
    >>> from mcpadvisor.domains.search import SearchOrchestrator, SearchQuery
    >>> orchestrator = SearchOrchestrator(providers)
    >>> results = await orchestrator.search(SearchQuery(task_description="read PDF files"))
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
