# layout_engine/templates.py
"""
Canned layout requests for common arrangements.

Each template pairs a LayoutRequest payload with a short description and
an example prompt a user might say to get it.

    >>> request = get_template('company-employee')
    >>> request.strategy
    'hierarchical-grouping'
"""

from typing import Any, Dict, List

from .request import LayoutRequest

TEMPLATES: Dict[str, Dict[str, Any]] = {
    'company-employee': {
        'description': "Companies as centers with employees around them",
        'example': "Show me companies with their employees grouped around them",
        'request': {
            'strategy': 'hierarchical-grouping',
            'primary': {'nodeType': 'Company', 'role': 'group-center'},
            'secondary': {'nodeType': 'Person', 'role': 'group-member', 'groupBy': 'WorksAt relationship'},
            'layout': {'modifications': {'Person-Company via WorksAt': 'strong attraction'}},
        },
    },
    'project-centered': {
        'description': "Projects in center with contributors around",
        'example': "Organize by projects with contributors nearby",
        'request': {
            'strategy': 'radial',
            'primary': {'nodeType': 'Project'},
            'secondary': {'nodeType': 'Person'},
            'tertiary': {'nodeType': 'Technology'},
        },
    },
    'timeline': {
        'description': "Nodes arranged by time along Z-axis",
        'example': "Arrange everything by when it was created",
        'request': {
            'strategy': 'temporal',
            'layout': {'timeAxis': 'z', 'groupByAxis': {'x': 'type', 'y': 'hierarchy'}},
        },
    },
}


def get_template(key: str) -> LayoutRequest:
    """
    Build a fresh LayoutRequest from a template.

    Raises:
    -------
    KeyError
        If `key` is not a known template
    """
    if key not in TEMPLATES:
        raise KeyError(f"Unknown layout template '{key}'. Available: {sorted(TEMPLATES)}")
    template = TEMPLATES[key]
    payload = dict(template['request'], originalPrompt=template['example'])
    return LayoutRequest.model_validate(payload)


def list_templates() -> List[Dict[str, str]]:
    """Key, description and example prompt of every template."""
    return [
        {'key': key, 'description': t['description'], 'example': t['example']}
        for key, t in TEMPLATES.items()
    ]
