from __future__ import annotations

from enum import Enum


class UserType(str, Enum):
    """Kind of account stored in the ``user_type`` cookie."""

    CONCIERGERIE = "conciergerie"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    """Onboarding state of a prestataire, decided by a conciergerie."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MissionStatus(str, Enum):
    """Progress of an assigned mission. No status means the mission is available."""

    ACCEPTED = "accepted"
    STARTED = "started"
    COMPLETED = "completed"


class Task(str, Enum):
    CLEANING = "Ménage"
    GARDENING = "Jardinage"
    ARRIVAL = "Arrivée"
    DEPARTURE = "Départ"


class MissionSortField(str, Enum):
    DATE = "date"
    CONCIERGERIE = "conciergerie"
    GEOGRAPHIC_ZONE = "geographicZone"
    HOME_TITLE = "homeTitle"


class EmailType(str, Enum):
    """Kinds of transactional emails, used to tag the retry queue."""

    VERIFICATION = "verification"
    REGISTRATION = "registration"
    ACCEPTANCE = "acceptance"
    MISSION_STATUS = "missionStatus"
    LATE_COMPLETION = "lateCompletion"
    MISSION_ACCEPTANCE = "missionAcceptance"
    MISSION_UPDATED = "missionUpdated"
    MISSION_REMOVED = "missionRemoved"
    NEW_DEVICE = "newDevice"
