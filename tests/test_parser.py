# tests/test_parser.py
"""
PARSER TESTS: Requests -> StructuredLayout
==========================================

What must hold:
1. Every strategy tag maps to its layout type
2. parse() NEVER raises: bad requests become the default layout
3. Relationship names and qualitative forces are extracted exactly
4. Constraints are derived from the populated role slots
"""

import pytest

from layout_engine.context import GraphContext
from layout_engine.parser import (
    LayoutParser,
    UnknownRelationshipWarning,
    UnknownStrategyWarning,
    extract_relationship,
    parse_force_value,
)
from layout_engine.structured import (
    ForceSpec,
    GroupSpec,
    LayoutType,
    NodeForce,
    ProximityConstraint,
    SeparationConstraint,
    VerticalConstraint,
)


def make_context(properties=()):
    return GraphContext.from_types(
        node_types=['Company', 'Person', 'Project'],
        relationship_types=['WorksAt', 'WorksOn', 'Knows'],
        properties=properties,
    )


def make_hierarchical_request(**overrides):
    request = {
        'strategy': 'hierarchical-grouping',
        'primary': {'nodeType': 'Company'},
        'secondary': {'nodeType': 'Person', 'groupBy': 'WorksAt relationship'},
    }
    request.update(overrides)
    return request


class TestStrategyDispatch:

    @pytest.mark.parametrize('strategy, expected', [
        ('hierarchical-grouping', LayoutType.HIERARCHICAL_FORCE),
        ('force-directed', LayoutType.FORCE_DIRECTED),
        ('radial', LayoutType.RADIAL),
        ('temporal', LayoutType.TEMPORAL),
        ('semantic', LayoutType.SEMANTIC),
    ])
    def test_strategy_maps_to_layout_type(self, strategy, expected):
        layout = LayoutParser().parse({'strategy': strategy, 'primary': {'nodeType': 'Company'}}, make_context())
        assert layout.type == expected
        assert layout.metadata['strategy'] == strategy
        assert 'timestamp' in layout.metadata

    def test_unknown_strategy_is_force_directed_with_warning(self):
        layout = LayoutParser().parse({'strategy': 'spiral'}, make_context())

        assert layout.type == LayoutType.FORCE_DIRECTED
        assert layout.metadata['strategy'] == 'spiral'
        assert any(isinstance(w, UnknownStrategyWarning) for w in layout.warnings)

    def test_original_prompt_is_kept(self):
        layout = LayoutParser().parse(
            make_hierarchical_request(originalPrompt="group people by company"), make_context()
        )
        assert layout.metadata['original_prompt'] == "group people by company"


class TestFallback:
    """Hard validation failures never escape parse()."""

    def test_unknown_node_type_gives_default_layout(self):
        request = make_hierarchical_request(primary={'nodeType': 'Spaceship'})
        layout = LayoutParser().parse(request, make_context())

        assert layout.type == LayoutType.FORCE_DIRECTED
        assert layout.metadata == {'strategy': 'default', 'reason': 'parsing-failed'}
        assert layout.global_forces.charge == -200
        assert layout.global_forces.gravity == pytest.approx(0.1)
        assert layout.global_forces.damping == pytest.approx(0.9)
        assert layout.forces == {'default': ForceSpec(strength=0.5, distance=3.0)}

    def test_unknown_tertiary_type_gives_default_layout(self):
        request = make_hierarchical_request(tertiary={'nodeType': 'Ghost'})
        layout = LayoutParser().parse(request, make_context())
        assert layout.metadata['reason'] == 'parsing-failed'

    def test_malformed_payload_gives_default_layout(self):
        layout = LayoutParser().parse({'primary': 'not-a-role'}, make_context())
        assert layout.metadata['reason'] == 'parsing-failed'

    def test_group_by_without_primary_gives_default_layout(self):
        request = {
            'strategy': 'hierarchical-grouping',
            'secondary': {'nodeType': 'Person', 'groupBy': 'WorksAt relationship'},
        }
        layout = LayoutParser().parse(request, make_context())
        assert layout.metadata['reason'] == 'parsing-failed'

    def test_failure_is_logged(self, caplog):
        with caplog.at_level('ERROR', logger='layout_engine.parser'):
            LayoutParser().parse(make_hierarchical_request(primary={'nodeType': 'Spaceship'}), make_context())
        assert any('Parsing failed' in r.message for r in caplog.records)


class TestHierarchicalGrouping:

    def test_hierarchy_and_groups(self):
        layout = LayoutParser().parse(make_hierarchical_request(), make_context())

        assert [(h.type, h.level, h.role) for h in layout.hierarchy] == [
            ('Company', 0, 'parent'),
            ('Person', 1, 'child'),
        ]
        assert layout.groups == [GroupSpec(parent='Company', children='Person', relationship='WorksAt',
                                           arrangement='circular', radius=3.0)]
        assert layout.warnings == []

    def test_tertiary_role_defaults_to_related(self):
        request = make_hierarchical_request(tertiary={'nodeType': 'Project'})
        layout = LayoutParser().parse(request, make_context())
        assert layout.hierarchy[2].role == 'related'
        assert layout.hierarchy[2].level == 2

    def test_unknown_relationship_is_kept_with_warning(self):
        request = make_hierarchical_request(secondary={'nodeType': 'Person', 'groupBy': 'Likes relationship'})
        layout = LayoutParser().parse(request, make_context())

        assert layout.type == LayoutType.HIERARCHICAL_FORCE
        assert layout.groups[0].relationship == 'Likes'
        assert any(isinstance(w, UnknownRelationshipWarning) for w in layout.warnings)

    def test_modifications_are_quantified(self):
        request = make_hierarchical_request(layout={'modifications': {'Person-Company via WorksAt': 'strong attraction'}})
        layout = LayoutParser().parse(request, make_context())
        assert layout.forces['Person-Company via WorksAt'] == ForceSpec(0.8, 2.0, 'attraction')


class TestOtherStrategies:

    def test_force_directed_globals_and_priority(self):
        request = {
            'strategy': 'force-directed',
            'primary': {'nodeType': 'Company', 'spatialPriority': 'high'},
            'layout': {'modifications': {'Person-Company': 'strong attraction', 'Company': 'weak repulsion'}},
        }
        layout = LayoutParser().parse(request, make_context())

        assert layout.global_forces.charge == -100
        assert layout.node_forces == {'Company': NodeForce(charge=-500, mass=2.0)}
        assert list(layout.forces) == ['Person-Company']

    def test_force_directed_normal_priority(self):
        request = {'strategy': 'force-directed', 'primary': {'nodeType': 'Person'}}
        layout = LayoutParser().parse(request, make_context())
        assert layout.node_forces['Person'].charge == -200

    def test_radial_rings(self):
        request = {
            'strategy': 'radial',
            'primary': {'nodeType': 'Project'},
            'secondary': {'nodeType': 'Person'},
            'tertiary': {'nodeType': 'Company'},
        }
        layout = LayoutParser().parse(request, make_context())

        assert layout.center == 'Project'
        assert [(r.node_type, r.radius, r.angle) for r in layout.rings] == [
            ('Project', 0.0, 'fixed'),
            ('Person', 3.0, 'distribute'),
            ('Company', 6.0, 'distribute'),
        ]
        assert layout.radial_weight == pytest.approx(0.8)
        assert layout.tangential_weight == pytest.approx(0.3)

    def test_temporal_discovers_time_property(self):
        context = make_context(properties=['Person.name', 'Person.joinedAt', 'Company.founded'])
        layout = LayoutParser().parse({'strategy': 'temporal'}, context)

        assert layout.time_axis == 'z'
        assert layout.time_property == 'joinedAt'
        assert layout.grouping == {'x': 'type', 'y': 'hierarchy'}

    def test_temporal_defaults(self):
        layout = LayoutParser().parse({'strategy': 'temporal', 'layout': {'timeAxis': 'x'}}, make_context())
        assert layout.time_axis == 'x'
        assert layout.time_property == 'createdAt'

    def test_semantic_attributes(self):
        context = make_context(properties=['Person.age', 'Person.team'])
        implicit = LayoutParser().parse({'strategy': 'semantic'}, context)
        explicit = LayoutParser().parse({'strategy': 'semantic', 'layout': {'attributes': ['age']}}, context)

        assert implicit.attributes == ['Person.age', 'Person.team']
        assert implicit.algorithm == 'pca'
        assert implicit.dimensions == 3
        assert explicit.attributes == ['age']


class TestConstraints:

    def test_vertical_from_primary_and_secondary(self):
        layout = LayoutParser().parse(make_hierarchical_request(), make_context())
        assert layout.constraints == [VerticalConstraint(higher='Company', lower='Person', min_distance=2.0)]

    def test_proximity_and_separation(self):
        request = make_hierarchical_request(
            tertiary={'nodeType': 'Project', 'nearTo': 'Person'},
            visual={'spacing': 'groups well separated'},
        )
        layout = LayoutParser().parse(request, make_context())

        assert ProximityConstraint(node_type='Project', near_to='Person', max_distance=5.0) in layout.constraints
        assert SeparationConstraint(node_type='Company', min_distance=10.0) in layout.constraints

    def test_constraints_for_non_hierarchical_strategies(self):
        request = {'strategy': 'radial', 'primary': {'nodeType': 'Project'}, 'secondary': {'nodeType': 'Person'}}
        layout = LayoutParser().parse(request, make_context())
        assert [c.kind for c in layout.constraints] == ['vertical']


class TestExtractRelationship:

    @pytest.mark.parametrize('text, expected', [
        ("WorksAt relationship to Company", 'WorksAt'),
        ("via WorksOn", 'WorksOn'),
        ("Knows", 'Knows'),
        ("connected through Manages", 'Manages'),
        ("worksat RELATIONSHIP", 'worksat'),
    ])
    def test_patterns(self, text, expected):
        assert extract_relationship(text) == expected

    def test_unmatched_text_is_verbatim(self):
        assert extract_relationship("people who know each other") == "people who know each other"


class TestParseForceValue:

    def test_strong_attraction(self):
        assert parse_force_value("strong attraction") == ForceSpec(strength=0.8, distance=2.0, kind='attraction')

    def test_weak_repulsion_uses_charge_scale(self):
        force = parse_force_value("weak repulsion")
        assert force.strength == pytest.approx(-100.0)
        assert force.distance == pytest.approx(5.0)
        assert force.kind == 'repulsion'

    def test_case_insensitive(self):
        assert parse_force_value("Strong Attraction").kind == 'attraction'

    def test_unmatched_is_medium_spring(self):
        assert parse_force_value("somewhat sticky") == ForceSpec(strength=0.5, distance=3.0, kind='spring')

    def test_dict_description(self):
        force = parse_force_value({'repulsion': 'strong'})
        assert force.strength == pytest.approx(-400.0)
        assert force.distance == pytest.approx(2.0)
        assert force.kind == 'repulsion'
