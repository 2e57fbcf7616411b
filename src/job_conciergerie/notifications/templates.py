"""French HTML bodies of the transactional emails.

Every builder returns a ready-to-send :class:`Email`. Bodies are rendered with
Jinja2 from the inline templates below.
"""
from __future__ import annotations

from typing import Sequence

from jinja2 import BaseLoader, Environment

from ..common.datetime_utils import format_date_range
from ..conciergeries.model import Conciergerie
from ..core.enums import MissionStatus
from ..employees.model import Employee
from ..homes.model import Home
from ..missions.model import Mission
from .model import Email

_JINJA_ENV = Environment(loader=BaseLoader(), autoescape=True, trim_blocks=True, lstrip_blocks=True)

_LAYOUT_OPEN = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
_LAYOUT_CLOSE = "<p>Merci,<br>L'équipe Job Conciergerie</p></div>"

_MISSION_BLOCK = """
<ul>
  <li><strong>Bien :</strong> {{ home_title }}</li>
  <li><strong>Lieu :</strong> {{ zone }}</li>
  <li><strong>Date :</strong> {{ date_range }}</li>
  <li><strong>Tâches :</strong> {{ tasks }}</li>
</ul>
"""

_VERIFICATION = """
<h2 style="color: #333;">Vérification de votre compte conciergerie</h2>
<p>Bonjour {{ name }},</p>
<p>Nous avons reçu une demande d'inscription pour votre conciergerie sur notre plateforme Job Conciergerie.</p>
<p>Pour vérifier votre compte et accéder à votre espace, veuillez cliquer sur le lien ci-dessous :</p>
<p>
  <a href="{{ url }}" style="display: inline-block; background-color: #4F46E5; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px;">
    Vérifier mon compte
  </a>
</p>
<p>Ou copiez ce lien dans votre navigateur :</p>
<p>{{ url }}</p>
<p>Si vous n'avez pas demandé cette inscription, vous pouvez ignorer cet email.</p>
"""

_REGISTRATION = """
<h2 style="color: #333;">Nouvelle demande d'inscription employé</h2>
<p>Bonjour {{ conciergerie }},</p>
<p>Un nouvel employé a demandé à rejoindre votre conciergerie sur notre plateforme Job Conciergerie.</p>
<p><strong>Détails de l'employé :</strong></p>
<ul>
  <li><strong>Nom :</strong> {{ name }}</li>
  <li><strong>Email :</strong> {{ email }}</li>
  <li><strong>Téléphone :</strong> {{ tel }}</li>
  <li><strong>Lieu de vie :</strong> {{ zone }}</li>
  {% if message %}
  <li><strong>Message :</strong> {{ message }}</li>
  {% endif %}
</ul>
<p>Vous pouvez vous connecter à votre espace conciergerie pour accepter ou refuser cette demande.</p>
"""

_ACCEPTANCE = """
{% if accepted %}
<h2 style="color: #333;">Votre inscription a été acceptée</h2>
<p>Bonjour {{ first_name }},</p>
<p>La conciergerie {{ conciergerie }} a accepté votre demande d'inscription sur Job Conciergerie.</p>
{% if missions_count %}
<p>{{ missions_count }} mission{{ 's' if missions_count > 1 }} {{ 'sont disponibles' if missions_count > 1 else 'est disponible' }} dès maintenant.</p>
{% else %}
<p>Aucune mission n'est disponible pour le moment, vous serez informé(e) dès qu'une mission sera proposée.</p>
{% endif %}
{% else %}
<h2 style="color: #333;">Votre inscription a été refusée</h2>
<p>Bonjour {{ first_name }},</p>
<p>La conciergerie {{ conciergerie }} n'a pas donné suite à votre demande d'inscription sur Job Conciergerie.</p>
{% endif %}
<p>Pour toute question, contactez la conciergerie : {{ conciergerie_email }}{% if conciergerie_tel %} / {{ conciergerie_tel }}{% endif %}</p>
"""

_MISSION_STATUS = """
<h2 style="color: #333;">Mission {{ status_label }}</h2>
<p>Bonjour {{ conciergerie }},</p>
<p>{{ employee }} a {{ action_label }} la mission suivante :</p>
""" + _MISSION_BLOCK

_LATE_COMPLETION = """
<h2 style="color: #333;">Mission non terminée</h2>
<p>Bonjour {{ conciergerie }},</p>
<p>La mission suivante, confiée à {{ employee }} ({{ employee_tel }}), aurait dû être terminée mais n'a pas été marquée comme terminée :</p>
""" + _MISSION_BLOCK + """
<p>Nous vous invitons à contacter le prestataire pour faire le point.</p>
"""

_MISSION_ACCEPTANCE = """
<h2 style="color: #333;">Confirmation de mission</h2>
<p>Bonjour {{ first_name }},</p>
<p>Vous avez accepté la mission suivante pour la conciergerie {{ conciergerie }} :</p>
""" + _MISSION_BLOCK + """
<p>N'oubliez pas de démarrer la mission dans l'application à votre arrivée.</p>
"""

_MISSION_UPDATED = """
<h2 style="color: #333;">Mission modifiée</h2>
<p>Bonjour {{ first_name }},</p>
<p>La conciergerie {{ conciergerie }} a modifié une mission qui vous est attribuée :</p>
<ul>
{% for change in changes %}
  <li>{{ change }}</li>
{% endfor %}
</ul>
<p><strong>Mission mise à jour :</strong></p>
""" + _MISSION_BLOCK

_MISSION_REMOVED = """
<h2 style="color: #333;">Mission {{ title_label }}</h2>
<p>Bonjour {{ first_name }},</p>
<p>La conciergerie {{ conciergerie }} a {{ removed_label }} la mission suivante qui vous était attribuée :</p>
""" + _MISSION_BLOCK + """
{% if canceled %}
<p>La mission est de nouveau proposée aux autres prestataires.</p>
{% endif %}
"""

_NEW_DEVICE = """
<h2 style="color: #333;">Nouvel appareil détecté</h2>
<p>Bonjour {{ first_name }},</p>
<p>Une demande de connexion à votre compte Job Conciergerie a été faite depuis un nouvel appareil.</p>
<p>Pour l'autoriser, ouvrez l'application sur un appareil déjà connecté et validez-le depuis la page Paramètres.</p>
<p>Si vous n'êtes pas à l'origine de cette demande, vous pouvez la refuser depuis cette même page.</p>
"""

_STATUS_LABELS = {
    MissionStatus.ACCEPTED: ("acceptée", "accepté"),
    MissionStatus.STARTED: ("démarrée", "démarré"),
    MissionStatus.COMPLETED: ("terminée", "terminé"),
}


def _render(body: str, **context) -> str:
    return _JINJA_ENV.from_string(_LAYOUT_OPEN + body).render(**context) + _LAYOUT_CLOSE


def _mission_context(mission: Mission, home: Home) -> dict:
    return {
        "home_title": home.title,
        "zone": home.geographic_zone,
        "date_range": format_date_range(mission.start_date_time, mission.end_date_time),
        "tasks": ", ".join(t.value for t in mission.tasks),
    }


def verification_email(conciergerie: Conciergerie, verification_url: str) -> Email:
    return Email(
        to=conciergerie.email,
        subject="Vérification de votre compte conciergerie",
        html=_render(_VERIFICATION, name=conciergerie.name, url=verification_url),
    )


def registration_email(conciergerie: Conciergerie, employee: Employee) -> Email:
    return Email(
        to=conciergerie.email,
        subject="Nouvelle demande d'inscription employé",
        html=_render(
            _REGISTRATION,
            conciergerie=conciergerie.name,
            name=employee.full_name,
            email=employee.email,
            tel=employee.tel,
            zone=employee.geographic_zone,
            message=employee.message,
        ),
    )


def acceptance_email(employee: Employee, conciergerie: Conciergerie, missions_count: int, is_accepted: bool) -> Email:
    subject = "Votre inscription a été acceptée" if is_accepted else "Votre inscription a été refusée"
    return Email(
        to=employee.email,
        subject=subject,
        html=_render(
            _ACCEPTANCE,
            accepted=is_accepted,
            first_name=employee.first_name,
            conciergerie=conciergerie.name,
            conciergerie_email=conciergerie.email,
            conciergerie_tel=conciergerie.tel,
            missions_count=missions_count,
        ),
    )


def mission_status_email(
    mission: Mission,
    home: Home,
    employee: Employee,
    conciergerie: Conciergerie,
    status: MissionStatus,
) -> Email:
    status_label, action_label = _STATUS_LABELS[status]
    return Email(
        to=conciergerie.email,
        subject=f"Mission {status_label} : {home.title}",
        html=_render(
            _MISSION_STATUS,
            status_label=status_label,
            action_label=action_label,
            conciergerie=conciergerie.name,
            employee=employee.full_name,
            **_mission_context(mission, home),
        ),
    )


def late_completion_email(mission: Mission, home: Home, employee: Employee, conciergerie: Conciergerie) -> Email:
    return Email(
        to=conciergerie.email,
        subject=f"Mission non terminée : {home.title}",
        html=_render(
            _LATE_COMPLETION,
            conciergerie=conciergerie.name,
            employee=employee.full_name,
            employee_tel=employee.tel,
            **_mission_context(mission, home),
        ),
    )


def mission_acceptance_email(mission: Mission, home: Home, employee: Employee, conciergerie: Conciergerie) -> Email:
    return Email(
        to=employee.email,
        subject=f"Confirmation de mission : {home.title}",
        html=_render(
            _MISSION_ACCEPTANCE,
            first_name=employee.first_name,
            conciergerie=conciergerie.name,
            **_mission_context(mission, home),
        ),
    )


def mission_updated_email(
    mission: Mission,
    home: Home,
    employee: Employee,
    conciergerie: Conciergerie,
    changes: Sequence[str],
) -> Email:
    return Email(
        to=employee.email,
        subject=f"Mission modifiée : {home.title}",
        html=_render(
            _MISSION_UPDATED,
            first_name=employee.first_name,
            conciergerie=conciergerie.name,
            changes=list(changes),
            **_mission_context(mission, home),
        ),
    )


def mission_removed_email(
    mission: Mission,
    home: Home,
    employee: Employee,
    conciergerie: Conciergerie,
    removal: str,
) -> Email:
    canceled = removal == "canceled"
    removed_label = "annulé" if canceled else "supprimé"
    subject_label = "annulée" if canceled else "supprimée"
    return Email(
        to=employee.email,
        subject=f"Mission {subject_label} : {home.title}",
        html=_render(
            _MISSION_REMOVED,
            removed_label=removed_label,
            title_label=subject_label,
            canceled=canceled,
            first_name=employee.first_name,
            conciergerie=conciergerie.name,
            **_mission_context(mission, home),
        ),
    )


def new_device_email(employee: Employee) -> Email:
    return Email(
        to=employee.email,
        subject="Nouvel appareil connecté à votre compte",
        html=_render(_NEW_DEVICE, first_name=employee.first_name),
    )
