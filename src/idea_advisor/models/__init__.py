"""
Data models for the Idea Advisor service.
"""

from .project import (
    AlertStatus,
    Project,
    ProjectSubmission,
    ResponseType,
    SimilarityAlert,
    SubmissionInput,
    SubmissionStatus,
    SupervisorResponse,
)
from .team import (
    CoverageLevel,
    SkillLevel,
    TeamMember,
    TeamMemberProfile,
    TeamProfile,
    TechnicalSkill,
)
from .analysis import (
    GapImportance,
    IngestedProject,
    MergeAnalysis,
    MergedProjectProposal,
    ProjectElements,
    ProjectRef,
    RecommendationStrength,
    RoleAssignment,
    RoleRecommendationResult,
    SimilarityResult,
    TeamGap,
    ViabilityScores,
)
from .notification import (
    Notification,
    NotificationStatus,
    NotificationType,
    Severity,
    User,
    UserRole,
)

__all__ = [
    'AlertStatus',
    'Project',
    'ProjectSubmission',
    'ResponseType',
    'SimilarityAlert',
    'SubmissionInput',
    'SubmissionStatus',
    'SupervisorResponse',
    'CoverageLevel',
    'SkillLevel',
    'TeamMember',
    'TeamMemberProfile',
    'TeamProfile',
    'TechnicalSkill',
    'GapImportance',
    'IngestedProject',
    'MergeAnalysis',
    'MergedProjectProposal',
    'ProjectElements',
    'ProjectRef',
    'RecommendationStrength',
    'RoleAssignment',
    'RoleRecommendationResult',
    'SimilarityResult',
    'TeamGap',
    'ViabilityScores',
    'Notification',
    'NotificationStatus',
    'NotificationType',
    'Severity',
    'User',
    'UserRole',
]
