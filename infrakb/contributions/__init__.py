"""User contribution lifecycle for InfraKB.

Public API:
- store.ContributionStore    : submit, attach_conflicts, review, vote, queries
- models.UserContribution    : stored contribution with its ValidationState
- models.Contributor         : contributor counters with derived reputation
- validation.auto_validate   : structural check of submitted data
"""
