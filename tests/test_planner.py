import random

from research_queue_planner import (
    KnowledgeCategory,
    KnowledgeGraph,
    Node,
    QueueCategory,
    ResearchPlanner,
    missing_prerequisites,
)


def sample_nodes():
    return {
        "Smithing": Node(identifier="Smithing", friendly_name="Smithing"),
        "Machining": Node(identifier="Machining", friendly_name="Machining", prereqs=["Smithing"]),
        "Electricity": Node(identifier="Electricity", friendly_name="Electricity"),
        "Obelisk": Node(
            identifier="Obelisk", friendly_name="Obelisk study", knowledge_category=KnowledgeCategory.BASIC
        ),
        "Bioferrite": Node(
            identifier="Bioferrite",
            friendly_name="Bioferrite harvesting",
            knowledge_category=KnowledgeCategory.BASIC,
            prereqs=["Obelisk"],
        ),
        "Psychic": Node(
            identifier="Psychic", friendly_name="Psychic rituals", knowledge_category=KnowledgeCategory.ADVANCED
        ),
    }


def planner_for(**kwargs):
    graph = KnowledgeGraph(sample_nodes())
    return graph, ResearchPlanner(graph, **kwargs)


def orders(planner):
    return {category: controller.queue.identifiers() for category, controller in planner.queues.items()}


def test_items_are_routed_to_their_category_queue():
    graph, planner = planner_for()

    assert planner.append(graph.item("Machining"))
    assert planner.append(graph.item("Bioferrite"))
    assert planner.prepend(graph.item("Psychic"))
    planner.insert(graph.item("Electricity"), 0)

    assert orders(planner) == {
        QueueCategory.RESEARCH: ("Electricity", "Smithing", "Machining"),
        QueueCategory.ANOMALY: ("Psychic", "Obelisk", "Bioferrite"),
    }
    assert planner.manager.get_active(KnowledgeCategory.STANDARD) == graph.item("Electricity")
    assert planner.manager.get_active(KnowledgeCategory.BASIC) == graph.item("Obelisk")
    assert planner.manager.get_active(KnowledgeCategory.ADVANCED) == graph.item("Psychic")

    assert planner.remove(graph.item("Obelisk"))
    assert planner.controller(QueueCategory.ANOMALY).queue.identifiers() == ("Psychic",)
    assert planner.queue_for(graph.item("Smithing")) is planner.controller(QueueCategory.RESEARCH)


def test_complete_advances_queue_and_notifies_listeners():
    graph, planner = planner_for()
    events = []
    planner.subscribe(events.append)
    planner.append(graph.item("Machining"))

    event = planner.complete(graph.item("Smithing"))

    assert graph.is_completed("Smithing")
    assert event is not None
    assert event.category is QueueCategory.RESEARCH
    assert event.next == graph.item("Machining")
    assert events == [event]


def test_completion_reported_by_the_game_advances_queue():
    graph, planner = planner_for()
    planner.append(graph.item("Bioferrite"))
    planner.append(graph.item("Psychic"))

    graph.mark_completed("Psychic")
    event = planner.on_item_completed(graph.item("Psychic"))

    assert event is not None
    assert event.category is QueueCategory.ANOMALY
    assert event.next is None
    assert orders(planner)[QueueCategory.ANOMALY] == ("Obelisk", "Bioferrite")


def test_finish_marks_prerequisites_researched():
    graph, planner = planner_for()
    planner.append(graph.item("Machining"))
    planner.append(graph.item("Electricity"))

    planner.finish(graph.item("Machining"))

    assert graph.completed == frozenset({"Smithing", "Machining"})
    assert orders(planner)[QueueCategory.RESEARCH] == ("Electricity",)


def test_save_and_load_round_trip():
    graph, planner = planner_for()
    planner.append(graph.item("Machining"))
    planner.append(graph.item("Bioferrite"))
    payload = planner.save()

    restored_graph, restored = planner_for()
    decoded = restored.load(payload)

    assert decoded is not None
    assert orders(restored) == orders(planner)
    assert restored.manager.get_active(KnowledgeCategory.BASIC) == restored_graph.item("Obelisk")
    assert not restored.controller(QueueCategory.RESEARCH).history.can_undo


def test_load_ignores_invalid_payload():
    graph, planner = planner_for()
    planner.append(graph.item("Machining"))

    assert planner.load({"version": 2, "queues": {}}) is None
    assert orders(planner)[QueueCategory.RESEARCH] == ("Smithing", "Machining")


def test_tick_reconciles_research_started_elsewhere():
    graph, planner = planner_for()

    planner.manager.start(graph.item("Bioferrite"))
    planner.manager.start(graph.item("Psychic"))
    planner.tick()

    assert orders(planner) == {
        QueueCategory.RESEARCH: (),
        QueueCategory.ANOMALY: ("Psychic", "Obelisk", "Bioferrite"),
    }


def test_reset_clears_every_queue():
    graph, planner = planner_for()
    planner.append(graph.item("Machining"))
    planner.append(graph.item("Psychic"))

    planner.reset()

    assert orders(planner) == {QueueCategory.RESEARCH: (), QueueCategory.ANOMALY: ()}
    assert planner.manager.get_active(KnowledgeCategory.ADVANCED) is None


def layered_nodes(layers, width=3):
    nodes = {}
    previous: list[str] = []
    for layer in range(layers):
        current = [f"L{layer}N{index}" for index in range(width)]
        for identifier in current:
            nodes[identifier] = Node(identifier=identifier, friendly_name=identifier, prereqs=list(previous))
        previous = current
    return nodes


def test_deep_diamond_graph_queues_and_reconciles():
    graph = KnowledgeGraph(layered_nodes(30))
    planner = ResearchPlanner(graph)

    assert planner.append(graph.item("L29N0"))
    planner.tick()

    queued = orders(planner)[QueueCategory.RESEARCH]
    assert len(queued) == 88
    assert queued[:3] == ("L0N0", "L0N1", "L0N2")
    assert queued[-1] == "L29N0"


def assert_dependency_order(queue):
    identifiers = queue.identifiers()
    assert len(set(identifiers)) == len(identifiers), identifiers

    positions = {item: index for index, item in enumerate(queue)}
    for index, item in enumerate(queue):
        for prereq in missing_prerequisites(item):
            assert positions.get(prereq, len(identifiers)) < index, (prereq.identifier, identifiers)


def test_mixed_mutations_keep_prerequisites_ahead_without_duplicates():
    for seed in range(30):
        rng = random.Random(seed)
        nodes = layered_nodes(5)
        nodes["Optics"] = Node(identifier="Optics", friendly_name="Optics", prereqs=["L1N0"])
        nodes["Lasers"] = Node(identifier="Lasers", friendly_name="Lasers", prereqs=["Optics", "L3N2"])
        graph = KnowledgeGraph(nodes)
        planner = ResearchPlanner(graph)
        controller = planner.controller(QueueCategory.RESEARCH)
        candidates = graph.items(QueueCategory.RESEARCH)

        for _ in range(40):
            queued = controller.queue.items()
            operation = rng.choice(["append", "prepend", "insert", "remove", "complete", "undo", "redo"])
            if operation == "append":
                planner.append(rng.choice(candidates))
            elif operation == "prepend":
                planner.prepend(rng.choice(candidates))
            elif operation == "insert":
                planner.insert(rng.choice(candidates), rng.randint(-2, len(queued) + 2))
            elif operation == "remove" and queued:
                planner.remove(rng.choice(queued))
            elif operation == "complete" and queued:
                planner.complete(rng.choice(queued))
            elif operation == "undo":
                controller.undo()
            elif operation == "redo":
                controller.redo()

            assert_dependency_order(controller.queue)
