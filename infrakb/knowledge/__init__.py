"""Knowledge model and catalogue for InfraKB.

Public API:
- types      : entry variants (KnowledgeEntry union), TrustMetadata, KnowledgeSource
- infra      : COMPONENT_TYPES and the InfraSpec diagram model
- sources    : citation factories and shared standard references
- catalogue  : Catalogue with load-time validation (CatalogueValidationError)
- seed       : default_catalogue()
- source_validator : offline source/URL audit
"""
