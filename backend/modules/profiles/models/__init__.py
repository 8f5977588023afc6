from .profile_models import ParticipantProfile, CoachProfile, MembershipLevel

__all__ = ["ParticipantProfile", "CoachProfile", "MembershipLevel"]
