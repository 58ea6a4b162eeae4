"""Tests for the genetic strategy."""

import math

import pytest

from paramsearch.optimization.algorithms.genetic import GeneticOptimizer, PopulationMember

SPACE = [{"start": 0, "end": 6, "step": 1}, {"start": 0, "end": 1, "step": 0.25}]


def _peak(values):
    return -(values[0] - 3) ** 2 - (values[1] - 0.5) ** 2


# ── Operators ──


class TestOperators:

    def test_crossover_is_component_mean(self):
        optimizer = GeneticOptimizer(population_size=2, max_iterations=1)
        child = optimizer.crossover([2.0], [4.0])
        assert child.values == [3.0]
        assert child.fitness == 0.0

    def test_crossover_accepts_members(self):
        optimizer = GeneticOptimizer(population_size=2, max_iterations=1)
        child = optimizer.crossover(PopulationMember([1.0, 0.5]), PopulationMember([3.0, 1.5]))
        assert child.values == [2.0, 1.0]

    def test_crossover_rounds_to_first_parent_precision(self):
        optimizer = GeneticOptimizer(population_size=2, max_iterations=1)
        assert optimizer.crossover([1.0], [2.5]).values == [2.0]
        assert optimizer.crossover([2.5], [1.0]).values == [1.8]

    def test_crossover_ties_round_away_from_zero(self):
        optimizer = GeneticOptimizer(population_size=2, max_iterations=1)
        assert optimizer.crossover([0.25], [0.0]).values == [0.13]

    def test_mutation_resamples_within_range(self, make_context, recording_evaluator):
        context = make_context(SPACE, recording_evaluator())
        optimizer = GeneticOptimizer(population_size=2, max_iterations=1)
        for _ in range(50):
            member = optimizer.mutate(context, PopulationMember([3.0, 0.5]))
            assert context.space.validate_vector(member.values)

    def test_candidate_has_trailing_fitness_slot(self):
        member = PopulationMember([1.0, 2.0], fitness=4.0)
        assert member.candidate() == [1.0, 2.0, 4.0]
        assert member.parameters == [1.0, 2.0]

    def test_reproduce_makes_population_size_children(self, make_context, recording_evaluator):
        context = make_context(SPACE, recording_evaluator())
        optimizer = GeneticOptimizer(population_size=4, max_iterations=1)
        population = optimizer.initialize_population(context)
        children = optimizer.reproduce(context, population)
        assert len(children) == 4
        for child in children:
            assert all(0.0 <= value <= 6.0 for value in child.values)

    @pytest.mark.parametrize("kwargs", [
        {"population_size": 0, "max_iterations": 1},
        {"population_size": 1, "max_iterations": -1},
        {"population_size": 1, "max_iterations": 1, "mutation_probability": 1.5},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            GeneticOptimizer(**kwargs)


# ── Selection ──


class TestSelection:

    @pytest.mark.asyncio
    async def test_selection_sorts_and_truncates(self, make_context, recording_evaluator):
        context = make_context(SPACE, recording_evaluator(_peak))
        optimizer = GeneticOptimizer(population_size=4, max_iterations=1)
        population = optimizer.initialize_population(context) + optimizer.initialize_population(context)
        assert len(population) == 8

        completed = await optimizer.selection(context, population)
        assert completed
        assert len(population) == 4
        fitness = [member.fitness for member in population]
        assert fitness == sorted(fitness, reverse=True)

    @pytest.mark.asyncio
    async def test_unresolved_members_sort_last(self, make_context):
        async def evaluator(values):
            if values[0] == 0.0:
                raise RuntimeError("no report")
            return values[0]

        context = make_context([{"start": 0, "end": 6, "step": 1}], evaluator)
        optimizer = GeneticOptimizer(population_size=3, max_iterations=1)
        population = [PopulationMember([0.0]), PopulationMember([2.0]), PopulationMember([5.0])]
        await optimizer.selection(context, population)
        assert [member.values for member in population] == [[5.0], [2.0], [0.0]]
        assert population[-1].fitness is None

    @pytest.mark.asyncio
    async def test_selection_stops_on_cancellation(self, make_context, recording_evaluator):
        evaluator = recording_evaluator()
        context = make_context(SPACE, evaluator, cancelled=True)
        optimizer = GeneticOptimizer(population_size=4, max_iterations=1)
        population = optimizer.initialize_population(context)
        assert not await optimizer.selection(context, population)
        assert evaluator.calls == []


# ── Search ──


class TestGeneticSearch:

    @pytest.mark.asyncio
    async def test_best_matches_best_cached_result(self, make_context, recording_evaluator):
        context = make_context(SPACE, recording_evaluator(_peak))
        optimizer = GeneticOptimizer(population_size=5, max_iterations=10)
        best = await optimizer.search(context)

        key, report = context.evaluator.cache.best()
        assert best.fitness == report.fitness
        assert context.space.validate_vector(best.parameters)
        assert len(optimizer.generation_history) == 10

    @pytest.mark.asyncio
    async def test_each_candidate_evaluated_once(self, make_context, recording_evaluator):
        evaluator = recording_evaluator(_peak)
        context = make_context(SPACE, evaluator)
        await GeneticOptimizer(population_size=6, max_iterations=8).search(context)
        keys = [tuple(call) for call in evaluator.calls]
        assert len(keys) == len(set(keys))

    @pytest.mark.asyncio
    async def test_zero_iterations_evaluates_nothing(self, make_context, recording_evaluator):
        evaluator = recording_evaluator()
        context = make_context(SPACE, evaluator)
        best = await GeneticOptimizer(population_size=4, max_iterations=0).search(context)
        assert evaluator.calls == []
        assert best.fitness == -math.inf

    @pytest.mark.asyncio
    async def test_preset_cancellation_evaluates_nothing(self, make_context, recording_evaluator):
        evaluator = recording_evaluator()
        context = make_context(SPACE, evaluator, cancelled=True)
        optimizer = GeneticOptimizer(population_size=4, max_iterations=5)
        best = await optimizer.search(context)
        assert evaluator.calls == []
        assert best.fitness == -math.inf
        assert optimizer.was_cancelled

    @pytest.mark.asyncio
    async def test_same_seed_same_run(self, make_context, recording_evaluator):
        first = recording_evaluator(_peak)
        second = recording_evaluator(_peak)
        await GeneticOptimizer(population_size=4, max_iterations=5).search(make_context(SPACE, first, seed=11))
        await GeneticOptimizer(population_size=4, max_iterations=5).search(make_context(SPACE, second, seed=11))
        assert first.calls == second.calls

    def test_total_trials(self, make_context, recording_evaluator):
        context = make_context(SPACE, recording_evaluator())
        assert GeneticOptimizer(population_size=4, max_iterations=5).get_total_trials(context) == 20
