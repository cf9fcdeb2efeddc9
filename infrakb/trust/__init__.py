"""Trust scoring for InfraKB contributions.

Public API:
- scorer.calculate_reputation          : contributor reputation from counters
- scorer.calculate_initial_confidence  : starting confidence of a submission
- scorer.calculate_approved_confidence : confidence after admin approval
- scorer.apply_vote_adjustment         : community vote bonus
- scorer.get_auto_approval_level       : auto-approval privileges by reputation
"""
