"""Commit pipeline state machine using transitions library.

A commit is a strict sequence of gated steps; each step's on_enter
callback does the work and raises CommitStepError to abort:

    idle -> write_tree -> create_commit_object -> pre_commit_hook
         -> commit_msg_hook -> update_head -> post_commit_hook -> done

Any step before post_commit_hook can move to `failed`, leaving HEAD where
it was. A failing post-commit hook cannot undo the commit, so it ends in
`done` with a degraded outcome instead.

Usage:
    pipeline = CommitPipeline(runner, repository)
    result = pipeline.commit("Fix the frobnicator")
    if result.committed:
        ...
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from transitions import Machine

from gitindex.git.refs import is_object_id, write_tree, commit_tree, update_ref
from gitindex.git.runner import GitRunner
from gitindex.lib.errors import CommitStepError

logger = logging.getLogger(__name__)


class CommitStep(Enum):
    """Named pipeline steps, as reported to callers."""
    WRITE_TREE = "WriteTree"
    CREATE_COMMIT_OBJECT = "CreateCommitObject"
    PRE_COMMIT_HOOK = "PreCommitHook"
    COMMIT_MSG_HOOK = "CommitMsgHook"
    UPDATE_HEAD = "UpdateHead"
    POST_COMMIT_HOOK = "PostCommitHook"


class CommitOutcome(Enum):
    SUCCESS = "success"
    HOOK_FAILED = "hook_failed"  # Commit exists, post-commit hook failed
    FAILED = "failed"


# Pipeline states in execution order; each maps to the step it performs
STEP_STATES = [
    ("write_tree", CommitStep.WRITE_TREE),
    ("create_commit_object", CommitStep.CREATE_COMMIT_OBJECT),
    ("pre_commit_hook", CommitStep.PRE_COMMIT_HOOK),
    ("commit_msg_hook", CommitStep.COMMIT_MSG_HOOK),
    ("update_head", CommitStep.UPDATE_HEAD),
    ("post_commit_hook", CommitStep.POST_COMMIT_HOOK),
]

STEP_FOR_STATE = {name: step for name, step in STEP_STATES}

STATES = (
    ["idle"]
    + [{"name": name, "on_enter": f"_enter_{name}"} for name, _ in STEP_STATES]
    + ["done", "failed"]
)


def _build_transitions() -> list[dict]:
    """Linear `advance` chain plus `fail` from every gating step."""
    order = ["idle"] + [name for name, _ in STEP_STATES] + ["done"]
    transitions = [
        {"trigger": "advance", "source": src, "dest": dest}
        for src, dest in zip(order, order[1:])
    ]
    transitions.append({
        "trigger": "fail",
        "source": [name for name, _ in STEP_STATES[:-1]],
        "dest": "failed",
    })
    return transitions


TRANSITIONS = _build_transitions()


@dataclass
class CommitResult:
    """Result of a commit attempt."""
    outcome: CommitOutcome
    description: str
    sha: str | None = None
    failed_step: CommitStep | None = None

    @property
    def committed(self) -> bool:
        """True when HEAD now points at the new commit."""
        return self.outcome is not CommitOutcome.FAILED


def commit_subject(message: str) -> str:
    """Reflog reason for a commit: its first message line."""
    return "commit: " + message.split("\n", 1)[0]


class CommitPipeline:
    """Single-use state machine driving one commit.

    Wraps the transitions library:
    - each step state's on_enter does the git/hook work
    - CommitStepError from a step moves the machine to `failed`
    - all transitions are logged
    """

    def __init__(
        self,
        runner: GitRunner,
        repository,
        amend: bool = False,
        amend_environment: dict[str, str] | None = None,
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """
        Args:
            runner: git runner for the working directory
            repository: GitRepository providing refs, hooks and the message file
            amend: rewrite the tip commit (parent becomes HEAD^)
            amend_environment: author env overrides captured when amend was enabled
            on_transition: Optional callback(from_state, to_state, trigger)
        """
        self.runner = runner
        self.repository = repository
        self.amend = amend
        self.amend_environment = amend_environment
        self.on_transition = on_transition

        self.message = ""
        self.tree: str | None = None
        self.sha: str | None = None
        self.post_commit_ok = True

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name
        logger.debug(f"[FSM] commit: {from_state} -> {to_state} ({trigger})")
        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def commit(self, message: str) -> CommitResult:
        """Run the whole pipeline for message.

        The message is written to the repository's commit-message file first
        and left there when the commit fails.
        """
        if self.state != "idle":
            raise RuntimeError(f"Commit pipeline already used (state: {self.state})")

        self.message = message
        self.repository.write_commit_file(message)

        try:
            for _ in STEP_STATES:
                self.advance()
        except CommitStepError as e:
            self.fail()
            logger.error(f"[COMMIT] {e.message}")
            return CommitResult(
                outcome=CommitOutcome.FAILED,
                description=e.message,
                failed_step=CommitStep(e.step),
            )

        self.advance()
        if self.post_commit_ok:
            description = f"Successfully created commit {self.sha}"
            outcome = CommitOutcome.SUCCESS
            logger.info(f"[COMMIT] {description}")
        else:
            description = f"Post-commit hook failed, but successfully created commit {self.sha}"
            outcome = CommitOutcome.HOOK_FAILED
            logger.warning(f"[COMMIT] {description}")
        return CommitResult(outcome=outcome, description=description, sha=self.sha)

    def _enter_write_tree(self, event) -> None:
        logger.info("[COMMIT] Creating tree")
        result = write_tree(self.runner)
        tree = result.stdout.strip()
        if not result.success or not is_object_id(tree):
            raise CommitStepError(CommitStep.WRITE_TREE.value, "Creating tree failed")
        self.tree = tree

    def _enter_create_commit_object(self, event) -> None:
        logger.info("[COMMIT] Creating commit")
        parent = "HEAD^" if self.amend else "HEAD"
        if self.repository.parse_reference(parent) is None:
            # Initial commit (or amending the root commit): no parent
            parent = None

        env = self.amend_environment if self.amend else None
        result = commit_tree(self.runner, self.tree, self.message, parent=parent, env=env)
        sha = result.stdout.strip()
        if not result.success or not is_object_id(sha):
            raise CommitStepError(CommitStep.CREATE_COMMIT_OBJECT.value, "Could not create a commit object")
        self.sha = sha

    def _enter_pre_commit_hook(self, event) -> None:
        logger.info("[COMMIT] Running hooks")
        if not self.repository.execute_hook("pre-commit"):
            raise CommitStepError(CommitStep.PRE_COMMIT_HOOK.value, "Pre-commit hook failed")

    def _enter_commit_msg_hook(self, event) -> None:
        if not self.repository.execute_hook("commit-msg", str(self.repository.commit_message_file)):
            raise CommitStepError(CommitStep.COMMIT_MSG_HOOK.value, "Commit-msg hook failed")

    def _enter_update_head(self, event) -> None:
        logger.info("[COMMIT] Updating HEAD")
        result = update_ref(self.runner, "HEAD", self.sha, commit_subject(self.message))
        if not result.success:
            raise CommitStepError(CommitStep.UPDATE_HEAD.value, "Could not update HEAD")

    def _enter_post_commit_hook(self, event) -> None:
        logger.info("[COMMIT] Running post-commit hook")
        self.post_commit_ok = self.repository.execute_hook("post-commit")
