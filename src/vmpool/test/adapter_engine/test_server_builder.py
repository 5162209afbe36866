import random

import pytest

from vmpool.adapter_engine.adapters.hetzner.server_builder import (
    build_create_payload,
    build_list_params,
    pick_placement,
)


def test_placement_reaches_every_configured_option():
    networks = [101, 102, 103, 104]
    datacenters = ["nbg1", "fsn1", "hel1"]
    rng = random.Random(1234)

    picked_networks = {pick_placement(networks, rng) for _ in range(10_000)}
    picked_datacenters = {pick_placement(datacenters, rng) for _ in range(10_000)}

    assert picked_networks == set(networks)
    assert picked_datacenters == set(datacenters)


def test_placement_never_leaves_configured_list():
    options = ["ash"]

    assert {pick_placement(options) for _ in range(100)} == {"ash"}


def test_placement_rejects_empty_list():
    with pytest.raises(ValueError):
        pick_placement([])


def test_create_payload_labels_membership_and_original_name():
    payload = build_create_payload(
        name="worker-7",
        tag="HetznerUSLarge",
        server_type="cpx31",
        image_id=5,
        ssh_keys=[1, 2],
        network=101,
        location="ash",
        user_data="#cloud-config",
    )

    assert payload["labels"] == {"HetznerUSLarge": "1", "originalName": "worker-7"}
    assert payload["networks"] == [101]
    assert payload["location"] == "ash"
    assert payload["start_after_create"] is True


def test_list_params_only_send_label_selector_when_filtering():
    assert build_list_params(2) == {"sort": "id:asc", "page": 2, "per_page": 50}
    assert build_list_params(1, "HetznerEU")["label_selector"] == "HetznerEU"
