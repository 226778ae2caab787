from research_queue_planner import (
    QUEUE_LANES,
    KnowledgeCategory,
    KnowledgeGraph,
    Node,
    QueueCategory,
    QueueController,
    QueueSettings,
    ResearchManager,
    ResearchQueue,
)


def sample_nodes():
    return {
        "A": Node(identifier="A", friendly_name="Alpha"),
        "B": Node(identifier="B", friendly_name="Beta"),
        "C": Node(identifier="C", friendly_name="Gamma", prereqs=["A"]),
        "D": Node(identifier="D", friendly_name="Delta", prereqs=["C"]),
    }


def build(settings=None):
    settings = settings or QueueSettings()
    graph = KnowledgeGraph(sample_nodes())
    manager = ResearchManager(graph)
    queue = ResearchQueue(
        QueueCategory.RESEARCH,
        lanes=QUEUE_LANES[QueueCategory.RESEARCH],
        sink=manager,
        settings=settings,
    )
    return graph, manager, QueueController(queue, graph.by_identity, settings=settings)


def test_undo_on_fresh_controller_is_a_no_op():
    _, _, controller = build()

    assert not controller.undo()
    assert not controller.redo()
    assert controller.queue.identifiers() == ()


def test_undo_redo_round_trip_restores_orders():
    graph, _, controller = build()
    controller.append(graph.item("B"))
    controller.append(graph.item("D"))
    controller.insert(graph.item("B"), 4)
    final = controller.queue.identifiers()

    assert final == ("A", "C", "D", "B")

    assert controller.undo()
    assert controller.queue.identifiers() == ("B", "A", "C", "D")
    assert controller.undo()
    assert controller.queue.identifiers() == ("B",)
    assert controller.undo()
    assert controller.queue.identifiers() == ()

    assert controller.redo()
    assert controller.redo()
    assert controller.redo()
    assert controller.queue.identifiers() == final


def test_only_visible_changes_are_recorded():
    graph, _, controller = build()
    controller.append(graph.item("D"))

    controller.insert(graph.item("C"), 1)
    controller.append(graph.item("D"))
    controller.remove(graph.item("B"))

    assert controller.undo()
    assert controller.queue.identifiers() == ()
    assert not controller.history.can_undo


def test_new_mutation_discards_redo():
    graph, _, controller = build()
    controller.append(graph.item("A"))
    controller.undo()

    controller.append(graph.item("B"))

    assert not controller.redo()
    assert controller.queue.identifiers() == ("B",)


def test_undo_revalidates_snapshots():
    graph, _, controller = build()
    controller.append(graph.item("B"))
    controller.append(graph.item("D"))
    controller.clear()

    graph.block("B")
    controller.undo()

    assert controller.queue.identifiers() == ("A", "C", "D")


def test_on_item_completed_announces_next_head():
    graph, manager, controller = build()
    events = []
    controller.subscribe(events.append)
    controller.append(graph.item("D"))

    manager.mark_completed(graph.item("A"))
    event = controller.on_item_completed(graph.item("A"))

    assert event is not None
    assert event.finished == graph.item("A")
    assert event.next == graph.item("C")
    assert events == [event]
    assert controller.queue.identifiers() == ("C", "D")
    assert manager.get_active(KnowledgeCategory.STANDARD) == graph.item("C")


def test_on_item_completed_ignores_unfinished_and_non_head_items():
    graph, _, controller = build()
    events = []
    controller.subscribe(events.append)
    controller.append(graph.item("C"))
    controller.append(graph.item("B"))

    assert controller.on_item_completed(graph.item("D")) is None
    assert controller.on_item_completed(graph.item("B")) is None
    assert controller.queue.identifiers() == ("A", "C", "B")

    graph.mark_completed("B")
    assert controller.on_item_completed(graph.item("B")) is None
    assert controller.queue.identifiers() == ("A", "C")
    assert events == []


def test_completion_notices_can_be_disabled():
    graph, manager, controller = build(QueueSettings(completion_notices=False))
    events = []
    controller.subscribe(events.append)
    controller.append(graph.item("A"))

    manager.mark_completed(graph.item("A"))
    event = controller.on_item_completed(graph.item("A"))

    assert event is not None
    assert event.next is None
    assert events == []


def test_notify_instant_finished_is_not_recorded():
    graph, _, controller = build()
    controller.append(graph.item("D"))
    graph.mark_completed("A")

    finished = controller.notify_instant_finished()

    assert finished == (graph.item("A"),)
    assert controller.queue.identifiers() == ("C", "D")
    assert controller.undo()
    assert controller.queue.identifiers() == ()


def test_load_drops_unknown_ids_and_resets_history():
    graph, _, controller = build()
    controller.append(graph.item("B"))

    dropped = controller.load(["Missing", "D", "B", "D"])

    assert dropped == ("Missing",)
    assert controller.queue.identifiers() == ("A", "C", "D", "B")
    assert controller.save() == ("A", "C", "D", "B")
    assert not controller.history.can_undo


def test_reset_empties_queue_and_history():
    graph, _, controller = build()
    controller.append(graph.item("D"))

    controller.reset()

    assert controller.queue.identifiers() == ()
    assert not controller.history.can_undo
