"""
Auto-grouping of a roster into tee groups that honour play-together requests.

The matcher is greedy and order dependent on purpose: mutual requests seed
groups, one-way requests join the first group that has room, and everyone else
fills remaining seats. Roster order as supplied by the caller is the canonical
order for every step, so the same roster always produces the same groups no
matter how the preference rows were ordered.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

from lotus_scoring.models import Group, PairingPreference

PIN_MIN = 1000
PIN_MAX = 9999


class GroupingError(ValueError):
    pass


def _validate_roster(player_ids: Sequence[str], target_size: int) -> None:
    if not player_ids:
        raise GroupingError("No players to group")
    if target_size < 1:
        raise GroupingError(f"Group size must be at least 1, got {target_size}")
    if len(set(player_ids)) != len(player_ids):
        raise GroupingError("Player ids must be unique")


def build_preference_map(
    player_ids: Sequence[str],
    preferences: Iterable[PairingPreference],
) -> dict[str, list[str]]:
    """Map each rostered player to the players they asked for, in roster order."""
    position = {player_id: index for index, player_id in enumerate(player_ids)}
    wanted: dict[str, set[str]] = {player_id: set() for player_id in player_ids}
    for pref in preferences:
        if pref.player_id not in position or pref.preferred_player_id not in position:
            continue
        if pref.player_id == pref.preferred_player_id:
            continue
        wanted[pref.player_id].add(pref.preferred_player_id)
    return {
        player_id: sorted(targets, key=position.__getitem__)
        for player_id, targets in wanted.items()
    }


def mutual_pairs(
    player_ids: Sequence[str],
    preference_map: dict[str, list[str]],
) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    seen: set[frozenset[str]] = set()
    for player_id in player_ids:
        for other in preference_map.get(player_id, []):
            key = frozenset((player_id, other))
            if key in seen:
                continue
            seen.add(key)
            if player_id in preference_map.get(other, []):
                pairs.append((player_id, other))
    return pairs


class GroupMatcher:
    """Strategy seam for partitioning a roster into groups."""

    def match(
        self,
        player_ids: Sequence[str],
        preferences: Iterable[PairingPreference],
        target_size: int,
    ) -> list[list[str]]:
        raise NotImplementedError


class GreedyPairingMatcher(GroupMatcher):
    def match(
        self,
        player_ids: Sequence[str],
        preferences: Iterable[PairingPreference],
        target_size: int,
    ) -> list[list[str]]:
        _validate_roster(player_ids, target_size)
        wants = build_preference_map(player_ids, preferences)
        groups: list[list[str]] = []
        assigned: set[str] = set()

        if target_size >= 2:
            for first, second in mutual_pairs(player_ids, wants):
                if first in assigned or second in assigned:
                    continue
                members = [first, second]
                assigned.update(members)
                # players either seed asked for ride along while there is room
                for candidate in wants[first] + wants[second]:
                    if len(members) >= target_size:
                        break
                    if candidate in assigned:
                        continue
                    members.append(candidate)
                    assigned.add(candidate)
                groups.append(members)

        for player_id in player_ids:
            if player_id in assigned:
                continue
            targets = set(wants[player_id])
            for members in groups:
                if len(members) < target_size and targets.intersection(members):
                    members.append(player_id)
                    assigned.add(player_id)
                    break

        for player_id in player_ids:
            if player_id in assigned:
                continue
            open_group = next((members for members in groups if len(members) < target_size), None)
            if open_group is None:
                groups.append([player_id])
            else:
                open_group.append(player_id)
            assigned.add(player_id)

        return groups


def auto_generate_groups(
    player_ids: Sequence[str],
    preferences: Iterable[PairingPreference],
    target_size: int,
    matcher: GroupMatcher | None = None,
) -> list[Group]:
    strategy = matcher or GreedyPairingMatcher()
    partition = strategy.match(list(player_ids), list(preferences), target_size)
    return [
        Group(number=index, player_ids=tuple(members))
        for index, members in enumerate(partition, start=1)
    ]


def assign_round_robin(groups: Sequence[Group], player_ids: Sequence[str]) -> list[Group]:
    """
    Deal roster players not yet in any group across ``groups`` in turn.

    Preferences and group size are not considered. Groups keep their number,
    PIN and current members; the i-th unassigned player joins group
    ``i % len(groups)``.
    """
    if not groups:
        raise GroupingError("No groups created yet")
    if not player_ids:
        raise GroupingError("No players to assign")
    already = {player_id for group in groups for player_id in group.player_ids}
    members = [list(group.player_ids) for group in groups]
    unassigned = [player_id for player_id in dict.fromkeys(player_ids) if player_id not in already]
    for index, player_id in enumerate(unassigned):
        members[index % len(groups)].append(player_id)
    return [
        Group(number=group.number, player_ids=tuple(seated), pin=group.pin)
        for group, seated in zip(groups, members)
    ]


def generate_pin(rng: random.Random | None = None) -> str:
    source = rng or random.SystemRandom()
    return str(source.randint(PIN_MIN, PIN_MAX))


def assign_pins(
    groups: Sequence[Group],
    existing_pins: Iterable[str] = (),
    rng: random.Random | None = None,
) -> list[Group]:
    """Give every group a 4-digit PIN not already used in the tournament."""
    used = {str(pin) for pin in existing_pins}
    taken = {pin for pin in used if pin.isdigit() and PIN_MIN <= int(pin) <= PIN_MAX}
    if len(groups) > (PIN_MAX - PIN_MIN + 1) - len(taken):
        raise GroupingError("Not enough unused PINs left for this tournament")
    source = rng or random.SystemRandom()
    assigned: list[Group] = []
    for group in groups:
        pin = generate_pin(source)
        while pin in used:
            pin = generate_pin(source)
        used.add(pin)
        assigned.append(Group(number=group.number, player_ids=group.player_ids, pin=pin))
    return assigned
