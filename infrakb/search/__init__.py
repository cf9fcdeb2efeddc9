"""In-memory search over the InfraKB catalogue.

Public API:
- index.build_search_index        : build an immutable SearchIndex from a Catalogue
- engine.SearchEngine             : owns one index; search_knowledge, search_by_component,
                                    search_by_tag, get_related_knowledge, rebuild
- engine.SearchOptions / SearchResult
"""
