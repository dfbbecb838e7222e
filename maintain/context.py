"""Run context and the context mapper.

A Context holds the resolved parameter values for a single scenario run. The
ContextMapper projects a subset of those values onto each step, according to the
MappingRules a scenario declares, so that steps only ever see what they were
given and never the full context.
"""

from dataclasses import dataclass, field
import logging
from types import MappingProxyType

from maintain import exceptions

logger = logging.getLogger(__name__)


class Context:
    """Mutable key/value store of run parameters for one scenario invocation.

    The caller may set values until the owning scenario starts composing, at which
    point the context is frozen and further writes raise ContextLockedError.
    """

    def __init__(self, values=None):
        self._values = dict(values or {})
        self._frozen = False

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        self._frozen = True

    def get(self, key, default=None):
        return self._values.get(key, default)

    def set(self, key, value):
        if self._frozen:
            raise exceptions.ContextLockedError(
                f"Cannot set '{key}': the context is locked once composition starts"
            )
        self._values[key] = value

    def as_dict(self):
        return dict(self._values)

    def __contains__(self, key):
        return key in self._values

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        state = "frozen" if self._frozen else "open"
        return f"Context({state}, {self._values!r})"


@dataclass(frozen=True)
class MappingRule:
    """Projects one context key onto a named parameter of one or more procedure kinds.

    `targets` maps procedure kind -> bound parameter name, so the same context key
    can land under different names on different kinds.
    """

    context_key: str
    targets: MappingProxyType = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "targets", MappingProxyType(dict(self.targets)))

    @classmethod
    def uniform(cls, context_key, kinds, target=None):
        """Build a rule that uses the same target name for every kind."""
        return cls(context_key, dict.fromkeys(kinds, target or context_key))


def project(mapping_rules, context, kind):
    """Return the read-only bound parameters a step of `kind` receives from `context`."""
    bound = {}
    for rule in mapping_rules:
        if rule.context_key not in context:
            continue
        if (target := rule.targets.get(kind)) is not None:
            bound[target] = context[rule.context_key]
    return MappingProxyType(bound)


class ContextMapper:
    """Holds a scenario's mapping rules and applies them to steps as they are added."""

    def __init__(self, mapping_rules=None):
        self.rules = tuple(mapping_rules or ())

    def project(self, context, kind):
        return project(self.rules, context, kind)

    def check(self, procedures):
        """Find rule targets that the registered procedure for a kind does not accept.

        Args:
            procedures: mapping of kind -> Procedure class

        Returns:
            list of (context_key, kind, target) tuples; kinds with no registered
            procedure, or whose procedure accepts anything, are not checked
        """
        problems = []
        for rule in self.rules:
            for kind, target in rule.targets.items():
                proc_cls = procedures.get(kind)
                if proc_cls is None or proc_cls.accepted_params is None:
                    continue
                if target not in proc_cls.accepted_params:
                    problems.append((rule.context_key, kind, target))
        return problems
