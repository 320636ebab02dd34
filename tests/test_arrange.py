import random
import statistics

from descentchart.arrange import AnnealingArranger, place_rows, row_spans, stop_violations
from descentchart.layout import DescendantLayout, LayoutOptions, layout_chart
from descentchart.models import Chart, Family, Person


def annealed(chart, iterations, seed):
    return layout_chart(chart, LayoutOptions(arranger="annealing", iterations=iterations, seed=seed))


def test_zero_iterations_is_deterministic(two_marriages_chart):
    first = annealed(two_marriages_chart, 0, 1)
    second = annealed(two_marriages_chart, 0, 99)
    assert first.to_dict() == second.to_dict()


def test_same_seed_gives_same_layout(two_marriages_chart):
    first = annealed(two_marriages_chart, 500, 7)
    second = annealed(two_marriages_chart, 500, 7)
    assert first.to_dict() == second.to_dict()


def test_annealing_improves_fitness(two_marriages_chart):
    fitness = AnnealingArranger().fitness
    initial = fitness(annealed(two_marriages_chart, 0, 0))
    final = [fitness(annealed(two_marriages_chart, 2000, seed)) for seed in range(1, 5)]
    assert statistics.mean(final) <= initial


def test_partners_are_never_shifted(two_marriages_chart):
    lay = annealed(two_marriages_chart, 1000, 3)
    partners = [b for b in lay.blurbs if b.no_shift]
    assert [b.id for b in partners] == [2, 8, 5]
    assert all(b.left_shift == 0 for b in partners)


def test_annealed_layout_is_relative_and_in_bounds(brown_family_text):
    from descentchart.parsing import parse_chart

    lay = annealed(parse_chart(brown_family_text), 300, 5)
    assert all(not b.absolute_positioning for b in lay.blurbs)
    assert all(b.left_shift >= 0 for b in lay.blurbs)
    assert min(b.left() for b in lay.blurbs) == lay.margin
    assert len(lay.connectors) == 2


def test_align_places_parents_over_first_child(brown_family_text):
    from descentchart.parsing import parse_chart

    options = LayoutOptions(arranger="annealing", iterations=0)
    lay = DescendantLayout("", [], options)
    lay.add_person(parse_chart(brown_family_text).root, 0)
    AnnealingArranger(random.Random(0)).align(lay)

    assert lay.arena[1].x() >= lay.arena[3].x()
    assert lay.arena[-2].x() >= lay.arena[3].x()
    assert lay.arena[4].left_pad == options.hspace


def test_fitness_penalises_constraints():
    options = LayoutOptions()
    lay = DescendantLayout("", [], options)
    a = lay.new_blurb(1, [], ["Aaaa"], 0, None, None)
    b = lay.new_blurb(2, [], ["Bbbb"], 0, None, None)
    place_rows(lay, absolute=True)
    a.left_pos = 0
    b.left_pos = 10

    arranger = AnnealingArranger()
    assert arranger.fitness(lay) == 0

    b.keep_right_of.append(a)
    overlap = a.width - 10
    assert arranger.fitness(lay) == 10 * overlap**2

    b.keep_right_of.clear()
    a.keep_with_each_other(b)
    assert arranger.fitness(lay) == 2 * (b.x() - a.x()) ** 2


def test_row_spans_match_blurb_geometry(two_marriages_chart):
    lay = annealed(two_marriages_chart, 200, 2)
    spans = row_spans(lay)
    for b in lay.blurbs:
        assert spans[b.id] == (b.left(), b.x(), b.right())


def test_wide_row_is_annealed():
    children = [Person(id=n, details=[f"Child {n}"]) for n in range(2, 602)]
    chart = Chart(root=Person(id=1, details=["Root"], families=[Family(children=children)]))

    for iterations in (0, 50):
        lay = annealed(chart, iterations, 1)
        assert len(lay.rows[1]) == 600
        assert len(lay.connectors) == 600
        spans = row_spans(lay)
        for prev, b in zip(lay.rows[1], lay.rows[1][1:]):
            assert spans[b.id][0] >= spans[prev.id][2]


def stopped_layout(iterations=0):
    """A parent between its two children, held by left and right stops."""
    lay = DescendantLayout("", [], LayoutOptions(iterations=iterations))
    parent = lay.new_blurb(1, [], ["Parent"], 0, None, None)
    first = lay.new_blurb(2, [], ["Aa"], 1, parent, parent)
    last = lay.new_blurb(3, [], ["Bb"], 1, parent, parent)
    place_rows(lay, absolute=False)
    first.left_pad = 60
    last.left_pad = 100
    parent.left_shift = 100
    parent.left_stop = first
    parent.right_stop = last
    return lay, parent, first, last


def test_propose_never_crosses_a_stop():
    lay, parent, first, last = stopped_layout()
    assert first.x() < parent.x() < last.x()

    arranger = AnnealingArranger(random.Random(11))
    deltas = [arranger.propose(parent, 400) for _ in range(500)]
    deltas = [d for d in deltas if d is not None]

    assert any(d < 0 for d in deltas)
    assert any(d > 0 for d in deltas)
    for d in deltas:
        assert first.x() <= parent.x() + d <= last.x()
        assert parent.left_shift + d >= 0


def test_reflow_keeps_stops():
    lay, parent, first, last = stopped_layout(iterations=500)
    AnnealingArranger(random.Random(4)).reflow(lay)
    assert first.x() <= parent.x() <= last.x()


def test_reflow_breaks_no_respected_stop(two_marriages_chart):
    before = annealed(two_marriages_chart, 0, 0)
    violations_before = stop_violations(before.blurbs, row_spans(before))
    for seed in range(1, 4):
        lay = annealed(two_marriages_chart, 2000, seed)
        assert stop_violations(lay.blurbs, row_spans(lay)) <= violations_before
