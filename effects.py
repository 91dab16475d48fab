"""
Declarative page effects: tweens, timelines, scroll triggers, parallax.

These drive the page around the skill graph (intro animation, background
colour shifts while scrolling, headings sliding in, pointer parallax).
They run on their own clock and share no data with the particle
simulation.  Effects are described as plain data (``TweenSpec``,
``ScrollTrigger``) and played by a ``TweenEngine``.

Easing names follow the usual ``family.type`` notation, for example
``power3.out`` or ``back.out(1.7)``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from canvas import parse_css_color

EaseFn = Callable[[float], float]

_EASE_RE = re.compile(r'^(?P<family>[a-z]+\d?)(?:\.(?P<kind>in|out|inOut))?(?:\((?P<arg>[0-9.]+)\))?$')

_POWER_EXPONENT = {'power0': 1, 'power1': 2, 'power2': 3, 'power3': 4, 'power4': 5}

BACK_OVERSHOOT = 1.70158


def _power(exponent: int, kind: str) -> EaseFn:
    if kind == 'in':
        return lambda t: t ** exponent
    if kind == 'inOut':
        return lambda t: (2 * t) ** exponent / 2 if t < 0.5 else 1 - (2 * (1 - t)) ** exponent / 2
    return lambda t: 1 - (1 - t) ** exponent


def _back(overshoot: float, kind: str) -> EaseFn:
    c = overshoot
    if kind == 'in':
        return lambda t: (c + 1) * t ** 3 - c * t ** 2
    if kind == 'inOut':
        c2 = c * 1.525
        return lambda t: (
            ((2 * t) ** 2 * ((c2 + 1) * 2 * t - c2)) / 2
            if t < 0.5
            else ((2 * t - 2) ** 2 * ((c2 + 1) * (2 * t - 2) + c2) + 2) / 2
        )
    return lambda t: 1 + (c + 1) * (t - 1) ** 3 + c * (t - 1) ** 2


def _sine(kind: str) -> EaseFn:
    if kind == 'in':
        return lambda t: 1 - math.cos(t * math.pi / 2)
    if kind == 'inOut':
        return lambda t: -(math.cos(math.pi * t) - 1) / 2
    return lambda t: math.sin(t * math.pi / 2)


def get_easing(name: str) -> EaseFn:
    """Resolve an easing name such as ``power2.out`` or ``back.out(1.7)``."""
    if name in (None, '', 'none', 'linear'):
        return lambda t: t
    match = _EASE_RE.match(name)
    if match is None:
        raise ValueError(f"Unknown easing {name!r}")
    family = match.group('family')
    kind = match.group('kind') or 'out'
    arg = match.group('arg')
    if family in _POWER_EXPONENT:
        return _power(_POWER_EXPONENT[family], kind)
    if family == 'back':
        return _back(float(arg) if arg else BACK_OVERSHOOT, kind)
    if family == 'sine':
        return _sine(kind)
    raise ValueError(f"Unknown easing {name!r}")


# ----------------------------------------------------------------------------
# Property access on page elements (mappings or plain objects)
def get_value(target: Any, prop: str) -> Any:
    if isinstance(target, Mapping):
        return target[prop]
    return getattr(target, prop)


def set_value(target: Any, prop: str, value: Any) -> None:
    if isinstance(target, dict):
        target[prop] = value
    else:
        setattr(target, prop, value)


def _normalize(value: Any) -> Any:
    """Colours given as CSS strings become RGB tuples."""
    if isinstance(value, str):
        return parse_css_color(value)[:3]
    return value


def interpolate(start: Any, end: Any, t: float) -> Any:
    """Blend numbers or equal-length tuples; colours stay integer."""
    if isinstance(start, (tuple, list)):
        blended = tuple(a + (b - a) * t for a, b in zip(start, end))
        if all(isinstance(a, int) and isinstance(b, int) for a, b in zip(start, end)):
            return tuple(int(round(c)) for c in blended)
        return blended
    return start + (end - start) * t


@dataclass
class Tween:
    """Animate ``target.prop`` from ``start`` to ``end``."""
    target: Any
    prop: str
    start: Any
    end: Any
    duration: float = 0.5
    ease: str = 'power1.out'
    delay: float = 0.0
    # Write the start value before the tween begins.
    immediate_render: bool = False

    def __post_init__(self) -> None:
        self.start = _normalize(self.start)
        self.end = _normalize(self.end)
        self._ease_fn = get_easing(self.ease)

    @property
    def end_time(self) -> float:
        return self.delay + max(0.0, self.duration)

    def progress(self, t: float) -> float:
        local = t - self.delay
        if self.duration <= 0:
            return 1.0 if local >= 0 else 0.0
        return max(0.0, min(1.0, local / self.duration))

    def value_at(self, t: float) -> Any:
        p = self.progress(t)
        if p >= 1.0:
            return self.end
        return interpolate(self.start, self.end, self._ease_fn(p))

    def started(self, t: float) -> bool:
        return t >= self.delay

    def done(self, t: float) -> bool:
        return t >= self.end_time

    def apply(self, t: float) -> None:
        if self.started(t) or self.immediate_render:
            set_value(self.target, self.prop, self.value_at(t))


class Timeline:
    """Tweens placed one after another, with optional overlap."""

    def __init__(self):
        self.tweens: List[Tween] = []
        self.duration: float = 0.0

    def _resolve_position(self, position: Optional[Any]) -> float:
        if position is None:
            return self.duration
        if isinstance(position, (int, float)):
            return max(0.0, float(position))
        text = str(position).strip()
        if text.startswith('-=') or text.startswith('+='):
            offset = float(text[2:])
            return max(0.0, self.duration - offset if text[0] == '-' else self.duration + offset)
        raise ValueError(f"Unsupported timeline position {position!r}")

    def add(self, tween: Tween, position: Optional[Any] = None) -> 'Timeline':
        tween.delay += self._resolve_position(position)
        self.tweens.append(tween)
        self.duration = max(self.duration, tween.end_time)
        return self

    def from_to(
        self,
        targets: Sequence[Any],
        start_values: Dict[str, Any],
        end_values: Dict[str, Any],
        duration: float = 0.5,
        ease: str = 'power1.out',
        position: Optional[Any] = None,
        stagger: float = 0.0,
    ) -> 'Timeline':
        """Animate each target from ``start_values`` to ``end_values``.

        With ``stagger`` each target starts that many seconds after the
        previous one.
        """
        begin = self._resolve_position(position)
        for idx, target in enumerate(targets):
            for prop, end in end_values.items():
                tween = Tween(
                    target,
                    prop,
                    start_values[prop],
                    end,
                    duration=duration,
                    ease=ease,
                    delay=begin + idx * stagger,
                    immediate_render=True,
                )
                self.tweens.append(tween)
                self.duration = max(self.duration, tween.end_time)
        return self

    def from_(
        self,
        targets: Sequence[Any],
        start_values: Dict[str, Any],
        duration: float = 0.5,
        ease: str = 'power1.out',
        position: Optional[Any] = None,
        stagger: float = 0.0,
    ) -> 'Timeline':
        """Animate from ``start_values`` to whatever the targets hold now."""
        begin = self._resolve_position(position)
        for idx, target in enumerate(targets):
            end_values = {prop: get_value(target, prop) for prop in start_values}
            self.from_to([target], start_values, end_values, duration, ease, begin + idx * stagger)
        return self

    def update(self, t: float) -> None:
        for tween in sorted(self.tweens, key=lambda tw: tw.delay):
            tween.apply(t)

    def done(self, t: float) -> bool:
        return t >= self.duration


class TweenEngine:
    """Plays tweens and timelines against a shared clock (seconds).

    The clock starts with the first :meth:`update`.  Anything started
    before then is timed from that first update, so a slow startup does
    not eat into the animations.
    """

    def __init__(self):
        self.now: Optional[float] = None
        self._tweens: List[Tween] = []
        self._unclocked: List[Tween] = []
        self._timelines: List[Tuple[Optional[float], Timeline]] = []

    @property
    def active(self) -> int:
        return len(self._tweens) + len(self._timelines)

    def to(
        self,
        target: Any,
        prop: str,
        value: Any,
        duration: float = 0.5,
        ease: str = 'power1.out',
        delay: float = 0.0,
    ) -> Tween:
        """Tween from the current value, replacing a running tween of the same property."""
        self._tweens = [tw for tw in self._tweens if not (tw.target is target and tw.prop == prop)]
        self._unclocked = [tw for tw in self._unclocked if not (tw.target is target and tw.prop == prop)]
        begin = max(0.0, delay)
        tween = Tween(target, prop, get_value(target, prop), value, duration=duration, ease=ease, delay=begin)
        if self.now is None:
            self._unclocked.append(tween)
        else:
            tween.delay += self.now
        self._tweens.append(tween)
        return tween

    def play(self, timeline: Timeline) -> Timeline:
        self._timelines.append((self.now, timeline))
        timeline.update(0.0)
        return timeline

    def update(self, now: float) -> None:
        self.now = now
        for tween in self._unclocked:
            tween.delay += now
        self._unclocked = []
        self._timelines = [(now if s is None else s, tl) for s, tl in self._timelines]
        for tween in self._tweens:
            tween.apply(now)
        self._tweens = [tw for tw in self._tweens if not tw.done(now)]
        for started_at, timeline in self._timelines:
            timeline.update(now - started_at)
        self._timelines = [(s, tl) for s, tl in self._timelines if not tl.done(now - s)]


# ----------------------------------------------------------------------------
# Scroll triggers
_EDGE_WORDS = {'top': 0.0, 'center': 0.5, 'bottom': 1.0}


def _edge_offset(token: str, extent: float) -> float:
    if token in _EDGE_WORDS:
        return _EDGE_WORDS[token] * extent
    if token.endswith('%'):
        return float(token[:-1]) / 100.0 * extent
    if token.endswith('px'):
        return float(token[:-2])
    raise ValueError(f"Unsupported scroll position token {token!r}")


def trigger_scroll_position(position: str, element_top: float, element_height: float, viewport_height: float) -> float:
    """Scroll offset at which ``"<element edge> <viewport edge>"`` line up.

    ``"top center"`` is reached when the top of the element meets the
    middle of the viewport.
    """
    parts = position.split()
    if len(parts) != 2:
        raise ValueError(f"Scroll position must name two edges, got {position!r}")
    element_edge, viewport_edge = parts
    return element_top + _edge_offset(element_edge, element_height) - _edge_offset(viewport_edge, viewport_height)


@dataclass(frozen=True)
class TweenSpec:
    """A tween that has not been bound to a target yet."""
    prop: str
    value: Any
    duration: float = 1.0
    ease: str = 'power1.out'
    from_value: Any = None
    delay: float = 0.0


@dataclass(frozen=True)
class ScrollTrigger:
    """Run tweens when the page scrolls past ``trigger``'s start and end lines.

    ``on_enter``/``on_leave_back`` fire when scrolling down/up across the
    ``start`` line.  ``on_leave``/``on_enter_back`` do the same at the
    ``end`` line, and are never fired while ``end`` is ``None``.
    ``target`` names the element the tweens act on; ``None`` means the
    trigger element itself.
    """
    trigger: str
    start: str = 'top center'
    end: Optional[str] = None
    on_enter: Tuple[TweenSpec, ...] = ()
    on_leave_back: Tuple[TweenSpec, ...] = ()
    on_leave: Tuple[TweenSpec, ...] = ()
    on_enter_back: Tuple[TweenSpec, ...] = ()
    target: Optional[str] = None
    once: bool = False


def _crossing(previous: Optional[float], current: float, line: float) -> int:
    """+1 when scrolling down across ``line``, -1 when scrolling back up, else 0."""
    was_past = previous is not None and previous >= line
    is_past = current >= line
    if is_past and not was_past:
        return 1
    if was_past and not is_past:
        return -1
    return 0


class ScrollObserver:
    """Fires scroll trigger actions as the scroll position crosses them."""

    def __init__(
        self,
        engine: TweenEngine,
        triggers: Iterable[ScrollTrigger],
        resolve_target: Callable[[str], Any],
    ):
        self.engine = engine
        self.triggers: List[ScrollTrigger] = list(triggers)
        self.resolve_target = resolve_target
        self._last_scroll: Optional[float] = None
        self._spent: set[int] = set()

    def prime(self) -> None:
        """Put targets of entrance tweens in their starting state."""
        for trigger in self.triggers:
            target = self.resolve_target(trigger.target or trigger.trigger)
            for spec in trigger.on_enter:
                if spec.from_value is not None:
                    set_value(target, spec.prop, _normalize(spec.from_value))

    def _run(self, trigger: ScrollTrigger, specs: Sequence[TweenSpec]) -> None:
        target = self.resolve_target(trigger.target or trigger.trigger)
        for spec in specs:
            if spec.from_value is not None:
                set_value(target, spec.prop, _normalize(spec.from_value))
            self.engine.to(target, spec.prop, spec.value, duration=spec.duration, ease=spec.ease, delay=spec.delay)

    def update(
        self,
        scroll_y: float,
        viewport_height: float,
        layout: Mapping[str, Tuple[float, float]],
    ) -> List[Tuple[str, str]]:
        """Compare the scroll position with the previous one.

        ``layout`` maps element names to ``(top, height)`` in page
        coordinates.

        Returns
        -------
        list of tuple
            ``(trigger name, action)`` for each action fired, where action
            is one of ``'enter'``, ``'leave'``, ``'enter_back'`` and
            ``'leave_back'``.
        """
        previous = self._last_scroll
        self._last_scroll = scroll_y
        fired: List[Tuple[str, str]] = []
        for idx, trigger in enumerate(self.triggers):
            if trigger.trigger not in layout or idx in self._spent:
                continue
            top, height = layout[trigger.trigger]
            actions = []
            start_line = trigger_scroll_position(trigger.start, top, height, viewport_height)
            start_cross = _crossing(previous, scroll_y, start_line)
            end_cross = 0
            if trigger.end is not None:
                end_line = trigger_scroll_position(trigger.end, top, height, viewport_height)
                end_cross = _crossing(previous, scroll_y, end_line)
            # Scrolling down meets the start line first, scrolling up the end line.
            if start_cross > 0:
                actions.append(('enter', trigger.on_enter))
            if end_cross > 0:
                actions.append(('leave', trigger.on_leave))
            if end_cross < 0:
                actions.append(('enter_back', trigger.on_enter_back))
            if start_cross < 0:
                actions.append(('leave_back', trigger.on_leave_back))

            for name, specs in actions:
                if name != 'enter' and not specs:
                    continue
                self._run(trigger, specs)
                fired.append((trigger.trigger, name))
            if start_cross > 0 and trigger.once:
                self._spent.add(idx)
        return fired


class PointerParallax:
    """Ease a target's ``x``/``y`` offset toward the pointer position."""

    def __init__(self, engine: TweenEngine, target: Any, strength: float = 20.0, duration: float = 1.0, ease: str = 'power1.out'):
        self.engine = engine
        self.target = target
        self.strength = strength
        self.duration = duration
        self.ease = ease

    def offset_for(self, pos: Tuple[float, float], window_size: Tuple[int, int]) -> Tuple[float, float]:
        width, height = window_size
        if width <= 0 or height <= 0:
            return 0.0, 0.0
        return (pos[0] / width - 0.5) * self.strength, (pos[1] / height - 0.5) * self.strength

    def on_pointer(self, pos: Tuple[float, float], window_size: Tuple[int, int]) -> None:
        x, y = self.offset_for(pos, window_size)
        self.engine.to(self.target, 'x', x, duration=self.duration, ease=self.ease)
        self.engine.to(self.target, 'y', y, duration=self.duration, ease=self.ease)


# ----------------------------------------------------------------------------
# Page presets
def color_shift_triggers(base_color: str = '#f8fafc') -> List[ScrollTrigger]:
    """Background colour changes as each section reaches mid-screen."""
    steps = [
        ('skills', '#ffffff', base_color, 'bottom center'),
        ('roadmap', '#fff1f2', '#ffffff', 'bottom center'),
        ('projects', '#e2e8f0', '#fff1f2', 'bottom center'),
        ('experience', '#f8fafc', '#e2e8f0', None),
        ('contact', '#fef2f2', '#f8fafc', None),
    ]
    return [
        ScrollTrigger(
            trigger=name,
            start='top center',
            end=end,
            on_enter=(TweenSpec('background', enter, duration=1.0),),
            on_leave_back=(TweenSpec('background', back, duration=1.0),),
            target='body',
        )
        for name, enter, back, end in steps
    ]


def entrance_triggers(
    element_names: Iterable[str],
    start: str = 'top 80%',
    duration: float = 1.0,
    ease: str = 'power3.out',
    rise: float = 50.0,
    stagger: float = 0.0,
) -> List[ScrollTrigger]:
    """Elements slide up by ``rise`` and fade in the first time they show.

    The n-th element waits ``n * stagger`` seconds after its trigger fires.
    """
    return [
        ScrollTrigger(
            trigger=name,
            start=start,
            on_enter=(
                TweenSpec('y', 0.0, duration=duration, ease=ease, from_value=rise, delay=idx * stagger),
                TweenSpec('opacity', 1.0, duration=duration, ease=ease, from_value=0.0, delay=idx * stagger),
            ),
            once=True,
        )
        for idx, name in enumerate(element_names)
    ]


def heading_entrance_triggers(section_names: Iterable[str]) -> List[ScrollTrigger]:
    """Section headings, keyed ``<section>.heading``."""
    return entrance_triggers([f"{name}.heading" for name in section_names])


def roadmap_node_triggers(node_names: Iterable[str]) -> List[ScrollTrigger]:
    return entrance_triggers(node_names, start='top 80%', duration=0.8, ease='power2.out')


def project_card_triggers(card_names: Iterable[str]) -> List[ScrollTrigger]:
    """Project cards come in one after another, 0.1 s apart."""
    return entrance_triggers(card_names, start='top 85%', duration=0.6, ease='power2.out', stagger=0.1)


def build_hero_timeline(title: Any, subtitle: Any, button: Any) -> Timeline:
    """Intro sequence for the hero block."""
    timeline = Timeline()
    timeline.from_([title], {'opacity': 0.0, 'y': 50.0}, duration=1.0, ease='power4.out')
    timeline.from_([subtitle], {'opacity': 0.0, 'y': 30.0}, duration=1.0, ease='power3.out', position='-=0.5')
    timeline.from_to(
        [button],
        {'opacity': 0.0, 'scale': 0.8},
        {'opacity': 1.0, 'scale': 1.0},
        duration=0.5,
        ease='back.out(1.7)',
        position='-=0.3',
    )
    return timeline


def new_element(**values: Any) -> Dict[str, Any]:
    """Animatable state of one page element."""
    element: Dict[str, Any] = {'opacity': 1.0, 'x': 0.0, 'y': 0.0, 'scale': 1.0}
    element.update(values)
    return element
