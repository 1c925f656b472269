#!/usr/bin/env python3
"""
Tests for StageRegistry: seeding, stage mutations and the default-stage and
unique-order invariants.
"""

import unittest
import uuid
import warnings
from unittest.mock import patch

import pytest

from core.config_loader import PipelineConfig
from core.exceptions import (
    CompanyNotFound,
    DefaultStageProtected,
    DuplicateDefaultStage,
    InvalidStageOrder,
    StageInUse,
    StageNotFound,
)
from database.models import Application, PipelineStage
from database.repositories.stage import StageRepository
from pipeline.registry import StageRegistry
from tests import make_session_factory, seed_parties


@pytest.mark.db
class TestSeedingAndDefaults(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_session_factory()
        self.ids = seed_parties(self.session_factory)
        self.registry = StageRegistry(PipelineConfig(), self.session_factory)

    def test_first_listing_seeds_default_stages(self):
        stages = self.registry.list_stages(self.ids['company_id'])

        self.assertEqual(
            [stage.name for stage in stages],
            ["Applied", "Screening", "Interview", "Offer", "Hired", "Rejected"]
        )
        self.assertEqual([stage.order for stage in stages], list(range(6)))
        self.assertEqual([stage.name for stage in stages if stage.is_default], ["Applied"])

    def test_seeding_happens_once(self):
        self.registry.list_stages(self.ids['company_id'])
        stages = self.registry.list_stages(self.ids['company_id'])
        self.assertEqual(len(stages), 6)

    def test_unknown_company(self):
        with self.assertRaises(CompanyNotFound):
            self.registry.list_stages(uuid.uuid4())

    def test_duplicate_default_warns_and_lowest_order_wins(self):
        stages = self.registry.list_stages(self.ids['company_id'])
        session = self.session_factory()
        interview = session.get(PipelineStage, stages[2].id)
        interview.is_default = True
        session.commit()
        session.close()

        with self.assertLogs('pipeline.registry', level='WARNING'):
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                default = self.registry.get_default_stage(self.ids['company_id'])

        self.assertEqual(default.name, "Applied")
        self.assertTrue(any(issubclass(w.category, DuplicateDefaultStage) for w in caught))

    def test_missing_default_falls_back_to_first_stage(self):
        stages = self.registry.list_stages(self.ids['company_id'])
        session = self.session_factory()
        session.get(PipelineStage, stages[0].id).is_default = False
        session.commit()
        session.close()

        with self.assertLogs('pipeline.registry', level='WARNING'):
            default = self.registry.get_default_stage(self.ids['company_id'])
        self.assertEqual(default.id, stages[0].id)


@pytest.mark.db
class TestStageMutations(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_session_factory()
        self.ids = seed_parties(self.session_factory)
        self.registry = StageRegistry(PipelineConfig(), self.session_factory)
        self.stages = self.registry.list_stages(self.ids['company_id'])

    def test_create_appends_after_last(self):
        stage = self.registry.create_stage(self.ids['company_id'], "  Reference Check ", color="#123456")

        self.assertEqual(stage.name, "Reference Check")
        self.assertEqual(stage.order, 6)
        self.assertEqual(stage.color, "#123456")
        self.assertFalse(stage.is_default)

    def test_create_uses_default_colour(self):
        stage = self.registry.create_stage(self.ids['company_id'], "Trial Day")
        self.assertEqual(stage.color, PipelineConfig().default_stage_color)

    def test_create_rejects_blank_name(self):
        with self.assertRaises(ValueError):
            self.registry.create_stage(self.ids['company_id'], "   ")

    def test_first_stage_of_empty_company_is_default(self):
        registry = StageRegistry(PipelineConfig(default_stages=[]), self.session_factory)
        other = seed_parties(self.session_factory)

        stage = registry.create_stage(other['company_id'], "Inbox")

        self.assertTrue(stage.is_default)
        self.assertEqual(stage.order, 0)

    def test_update_moves_default_flag(self):
        screening = self.stages[1]

        self.registry.update_stage(screening.id, name="Phone Screen", color="#000000", is_default=True)

        stages = self.registry.list_stages(self.ids['company_id'])
        self.assertEqual([s.name for s in stages if s.is_default], ["Phone Screen"])
        self.assertEqual(stages[1].color, "#000000")

    def test_update_cannot_unflag_default(self):
        with self.assertRaises(DefaultStageProtected):
            self.registry.update_stage(self.stages[0].id, is_default=False)

    def test_update_unknown_stage(self):
        with self.assertRaises(StageNotFound):
            self.registry.update_stage(uuid.uuid4(), name="x")


@pytest.mark.db
class TestReorder(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_session_factory()
        self.ids = seed_parties(self.session_factory)
        self.registry = StageRegistry(PipelineConfig(default_stages=[]), self.session_factory)
        company_id = self.ids['company_id']
        self.a = self.registry.create_stage(company_id, "A")
        self.b = self.registry.create_stage(company_id, "B")
        self.c = self.registry.create_stage(company_id, "C")

    def _names(self):
        return [stage.name for stage in self.registry.list_stages(self.ids['company_id'])]

    def test_reorder_applies_permutation(self):
        result = self.registry.reorder(self.ids['company_id'], [self.b.id, self.a.id, str(self.c.id)])

        self.assertEqual([stage.name for stage in result], ["B", "A", "C"])
        self.assertEqual(self._names(), ["B", "A", "C"])
        orders = [stage.order for stage in self.registry.list_stages(self.ids['company_id'])]
        self.assertEqual(len(set(orders)), 3)

    def test_partial_list_rejected(self):
        with self.assertRaises(InvalidStageOrder) as ctx:
            self.registry.reorder(self.ids['company_id'], [self.b.id, self.a.id])

        self.assertEqual(ctx.exception.missing, [self.c.id])
        self.assertEqual(self._names(), ["A", "B", "C"])

    def test_foreign_and_duplicate_ids_rejected(self):
        other = seed_parties(self.session_factory)
        foreign = StageRegistry(PipelineConfig(), self.session_factory).list_stages(other['company_id'])[0]

        with self.assertRaises(InvalidStageOrder) as ctx:
            self.registry.reorder(self.ids['company_id'], [self.a.id, self.a.id, self.b.id, self.c.id, foreign.id])

        self.assertEqual(ctx.exception.duplicates, [self.a.id])
        self.assertEqual(ctx.exception.foreign, [foreign.id])

    def test_malformed_id_rejected(self):
        with self.assertRaises(InvalidStageOrder) as ctx:
            self.registry.reorder(self.ids['company_id'], [self.a.id, self.b.id, self.c.id, "not-a-uuid"])
        self.assertEqual(ctx.exception.foreign, ["not-a-uuid"])

    def test_failure_mid_reorder_keeps_original_order(self):
        original = StageRepository.set_order
        calls = []

        def failing_set_order(repo, stage, order):
            calls.append(stage.name)
            if len(calls) == 2:
                raise RuntimeError("connection lost")
            original(repo, stage, order)

        with patch.object(StageRepository, 'set_order', failing_set_order):
            with self.assertRaises(RuntimeError):
                self.registry.reorder(self.ids['company_id'], [self.c.id, self.b.id, self.a.id])

        self.assertEqual(self._names(), ["A", "B", "C"])


@pytest.mark.db
class TestDeleteStage(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_session_factory()
        self.ids = seed_parties(self.session_factory)
        self.registry = StageRegistry(PipelineConfig(), self.session_factory)
        self.stages = self.registry.list_stages(self.ids['company_id'])

    def _place_application(self, stage_id):
        session = self.session_factory()
        application = Application(
            candidate_id=self.ids['candidate_id'], job_id=self.ids['job_id'], current_stage_id=stage_id
        )
        session.add(application)
        session.commit()
        application_id = application.id
        session.close()
        return application_id

    def _set_stage(self, application_id, stage_id):
        session = self.session_factory()
        session.get(Application, application_id).current_stage_id = stage_id
        session.commit()
        session.close()

    def test_delete_unused_stage(self):
        self.registry.delete_stage(self.stages[3].id)
        self.assertNotIn("Offer", [stage.name for stage in self.registry.list_stages(self.ids['company_id'])])

    def test_delete_default_refused(self):
        with self.assertRaises(DefaultStageProtected):
            self.registry.delete_stage(self.stages[0].id)

    def test_delete_occupied_refused_until_emptied(self):
        interview = self.stages[2]
        application_id = self._place_application(interview.id)

        with self.assertRaises(StageInUse) as ctx:
            self.registry.delete_stage(interview.id)
        self.assertEqual(ctx.exception.occupants, 1)

        self._set_stage(application_id, self.stages[1].id)
        self.registry.delete_stage(interview.id)
        self.assertEqual(len(self.registry.list_stages(self.ids['company_id'])), 5)

    def test_delete_unknown(self):
        with self.assertRaises(StageNotFound):
            self.registry.delete_stage(uuid.uuid4())


if __name__ == '__main__':
    unittest.main()
