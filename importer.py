# importer.py
# Sources of the project list used when groups are formed

import json
from dataclasses import dataclass, field

from flask import current_app

from errors import ImportFailed


@dataclass
class ImportedProject:
    devpost_id: str
    name: str
    devpost_url: str = ''
    team_members: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        try:
            devpost_id = str(data['devpost_id']).strip()
            name = str(data['name']).strip()
        except (KeyError, TypeError):
            raise ValueError(f'Project entry is missing devpost_id or name: {data!r}') from None
        if not devpost_id or not name:
            raise ValueError(f'Project entry has an empty devpost_id or name: {data!r}')
        return cls(
            devpost_id=devpost_id,
            name=name,
            devpost_url=data.get('devpost_url') or '',
            team_members=list(data.get('team_members') or []),
        )


class StaticProjectSource:
    def __init__(self, projects):
        self.projects = list(projects)

    def fetch(self):
        return [p if isinstance(p, ImportedProject) else ImportedProject.from_dict(p) for p in self.projects]


class JsonFileProjectSource:
    """Reads a JSON export: a list of objects, or {"projects": [...]}."""

    def __init__(self, path):
        self.path = path

    def fetch(self):
        with open(self.path, encoding='utf-8') as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get('projects', [])
        if not isinstance(data, list):
            raise ValueError('Project export must contain a list of projects.')
        return [ImportedProject.from_dict(entry) for entry in data]


def get_project_source():
    source = current_app.extensions.get('project_source')
    if source is None:
        source = JsonFileProjectSource(current_app.config['PROJECTS_FILE'])
    return source


def import_projects(source=None):
    """Fetches projects in source order, dropping repeated devpost ids."""
    source = source or get_project_source()
    try:
        fetched = source.fetch()
    except (OSError, ValueError) as e:
        current_app.logger.warning('Project import failed: %s', e)
        raise ImportFailed(f'Failed to import projects: {e}') from e

    projects = []
    seen = set()
    for project in fetched:
        if project.devpost_id in seen:
            current_app.logger.warning('Skipping duplicate project %s (%s)', project.devpost_id, project.name)
            continue
        seen.add(project.devpost_id)
        projects.append(project)

    if not projects:
        raise ImportFailed('No projects available after importing.')
    current_app.logger.info('Imported %d projects', len(projects))
    return projects
