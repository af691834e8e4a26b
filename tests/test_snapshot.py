import pytest

from a11y_auditor.errors import SnapshotReadError
from a11y_auditor.snapshot.models import BoundingBox, PageSnapshot

from builders import build_snapshot, node, page


class TestPageSnapshot:

    def test_round_trips_through_dict(self):
        snapshot = page(
            node('main', attrs={'id': 'content'}),
            node('p', parent=0, text='Hello', style={'color': 'rgb(0, 0, 0)'}, box=(0, 0, 100, 20)),
        )
        again = PageSnapshot.from_dict(snapshot.to_dict())
        assert len(again) == len(snapshot)
        assert again.node(3).box == BoundingBox(0, 0, 100, 20)
        assert again.node(3).css('color') == 'rgb(0, 0, 0)'

    def test_rejects_forward_parent_links(self):
        with pytest.raises(SnapshotReadError):
            build_snapshot([node('div', parent=1), node('p')])

    def test_rejects_malformed_nodes(self):
        with pytest.raises(SnapshotReadError):
            PageSnapshot.from_dict({'url': 'x', 'nodes': [{'attributes': {}}]})
        with pytest.raises(SnapshotReadError):
            PageSnapshot.from_dict({'url': 'x'})

    def test_ancestors_and_children(self):
        snapshot = page(node('nav'), node('a', parent=0))
        link = snapshot.node(3)
        assert [a.tag for a in snapshot.ancestors(link)] == ['nav', 'body', 'html']
        assert [c.tag for c in snapshot.children(snapshot.node(2))] == ['a']

    def test_visibility(self):
        snapshot = page(
            node('div', style={'display': 'none'}),
            node('p', parent=0, text='hidden by parent'),
            node('p', text='invisible', style={'visibility': 'hidden'}),
            node('p', text='empty box', box=(0, 0, 0, 0)),
            node('p', text='shown', box=(0, 0, 10, 10)),
        )
        visible = [n.text for n in snapshot if n.tag == 'p' and snapshot.is_visible(n)]
        assert visible == ['shown']


class TestBoundingBox:

    def test_gap_between_separated_boxes(self):
        assert BoundingBox(0, 0, 10, 10).gap_to(BoundingBox(15, 0, 10, 10)) == pytest.approx(5)

    def test_gap_is_zero_when_touching(self):
        assert BoundingBox(0, 0, 10, 10).gap_to(BoundingBox(10, 0, 10, 10)) == 0

    def test_diagonal_gap(self):
        assert BoundingBox(0, 0, 10, 10).gap_to(BoundingBox(13, 14, 5, 5)) == pytest.approx(5)

    def test_contains(self):
        assert BoundingBox(0, 0, 100, 100).contains(BoundingBox(10, 10, 20, 20))
        assert not BoundingBox(10, 10, 20, 20).contains(BoundingBox(0, 0, 100, 100))


class TestSelectors:

    def test_unique_id_wins(self):
        snapshot = page(node('button', attrs={'id': 'save', 'class': 'btn'}))
        assert snapshot.selector(snapshot.node(2)) == '#save'

    def test_duplicate_id_is_not_used(self):
        snapshot = page(node('p', attrs={'id': 'dup'}), node('p', attrs={'id': 'dup'}))
        assert not snapshot.selector(snapshot.node(2)).startswith('#dup')

    def test_class_compound_scoped_to_landmark(self):
        snapshot = page(
            node('nav'),
            node('a', parent=0, attrs={'class': 'menu-link primary extra'}),
            node('main'),
            node('a', parent=2, attrs={'class': 'menu-link primary'}),
        )
        assert snapshot.selector(snapshot.node(3)) == 'nav a.menu-link.primary'
        assert snapshot.selector(snapshot.node(5)) == 'main a.menu-link.primary'

    def test_nth_of_type_when_classes_repeat(self):
        snapshot = page(
            node('ul'),
            node('li', parent=0, attrs={'class': 'item'}),
            node('li', parent=0, attrs={'class': 'item'}),
        )
        assert snapshot.selector(snapshot.node(3)) == 'li.item:nth-of-type(1)'
        assert snapshot.selector(snapshot.node(4)) == 'li.item:nth-of-type(2)'

    def test_never_a_bare_tag(self):
        snapshot = page(node('img', attrs={'src': 'a.png'}))
        selector = snapshot.selector(snapshot.node(2))
        assert selector != 'img'
        assert selector.startswith('img')

    def test_path_fallback_anchored_at_unique_ancestor(self):
        snapshot = page(
            node('div', attrs={'id': 'cards'}),
            node('div', parent=0),
            node('span', parent=1),
            node('div', parent=0),
            node('span', parent=3),
        )
        assert snapshot.selector(snapshot.node(6)) == '#cards > div:nth-of-type(2) > span:nth-of-type(1)'

    def test_selectors_are_unique(self):
        snapshot = page(
            node('section'),
            node('p', parent=0),
            node('p', parent=0),
            node('section'),
            node('p', parent=3),
        )
        selectors = [snapshot.selector(n) for n in snapshot]
        assert len(set(selectors)) == len(selectors)

    def test_role_landmark_keeps_attribute_spelling(self):
        snapshot = page(
            node('div', attrs={'role': 'Navigation'}),
            node('a', parent=0, attrs={'class': 'menu'}),
        )
        assert snapshot.selector(snapshot.node(3)) == '[role="Navigation"] a.menu'

    def test_repeated_landmarks_fall_back_to_a_path(self):
        snapshot = page(
            node('nav'),
            node('a', parent=0, attrs={'class': 'menu'}),
            node('nav'),
            node('a', parent=2, attrs={'class': 'menu'}),
        )
        assert snapshot.selector(snapshot.node(3)) == (
            'html > body:nth-of-type(1) > nav:nth-of-type(1) > a:nth-of-type(1)'
        )
        assert snapshot.selector(snapshot.node(5)) == (
            'html > body:nth-of-type(1) > nav:nth-of-type(2) > a:nth-of-type(1)'
        )
