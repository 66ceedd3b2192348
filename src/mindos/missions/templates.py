"""Daily micro-mission templates.

The table is immutable and ordered; the daily selector indexes into the
filtered list, so reordering entries changes which mission users get.
"""

from __future__ import annotations

from dataclasses import dataclass

from mindos.users.paths import UserPath

DIFFICULTY_LEVELS = {"easy": 2, "medium": 5, "hard": 8}


@dataclass(frozen=True)
class MissionTemplate:
    id: str
    title: str
    description: str
    estimated_time: str
    xp_reward: int
    difficulty: str
    category: str
    path_specific: tuple[UserPath, ...] = ()

    @property
    def difficulty_level(self) -> int:
        return DIFFICULTY_LEVELS[self.difficulty]

    def is_eligible(self, path: UserPath | None) -> bool:
        """General templates always match; path templates only match their paths."""
        return not self.path_specific or (path is not None and path in self.path_specific)


MISSION_TEMPLATES: tuple[MissionTemplate, ...] = (
    MissionTemplate(
        id="daily_automation_idea",
        title="Spot 1 Automation Opportunity",
        description="Identify one repetitive task in your daily routine that could be automated",
        estimated_time="5 min",
        xp_reward=25,
        difficulty="easy",
        category="awareness",
        path_specific=(UserPath.AUTOMATOR,),
    ),
    MissionTemplate(
        id="user_feedback_collection",
        title="Gather User Feedback",
        description="Ask 3 people about their biggest daily frustration and note their responses",
        estimated_time="7 min",
        xp_reward=35,
        difficulty="medium",
        category="research",
        path_specific=(UserPath.BUILDER,),
    ),
    MissionTemplate(
        id="network_connection",
        title="Make a New Connection",
        description="Reach out to someone new in your industry and start a genuine conversation",
        estimated_time="6 min",
        xp_reward=40,
        difficulty="medium",
        category="networking",
        path_specific=(UserPath.DEALMAKER,),
    ),
    MissionTemplate(
        id="prototype_sketch",
        title="Quick Prototype Sketch",
        description="Sketch a solution to a problem you noticed today (digital or paper)",
        estimated_time="5 min",
        xp_reward=30,
        difficulty="easy",
        category="creation",
        path_specific=(UserPath.BUILDER,),
    ),
    MissionTemplate(
        id="process_optimization",
        title="Optimize One Process",
        description="Take a process you do regularly and find a way to make it 20% faster",
        estimated_time="7 min",
        xp_reward=45,
        difficulty="medium",
        category="optimization",
        path_specific=(UserPath.AUTOMATOR,),
    ),
    MissionTemplate(
        id="value_proposition_practice",
        title="Practice Your Pitch",
        description="Record yourself explaining your value in 30 seconds or less",
        estimated_time="5 min",
        xp_reward=35,
        difficulty="medium",
        category="communication",
        path_specific=(UserPath.DEALMAKER,),
    ),
    MissionTemplate(
        id="learning_note",
        title="Capture One Learning",
        description="Write down the most interesting thing you learned today and why it matters",
        estimated_time="4 min",
        xp_reward=20,
        difficulty="easy",
        category="reflection",
    ),
    MissionTemplate(
        id="ai_tool_exploration",
        title="Try a New AI Tool",
        description="Spend 5 minutes exploring an AI tool you've never used before",
        estimated_time="5 min",
        xp_reward=30,
        difficulty="easy",
        category="exploration",
    ),
)

TEMPLATES_BY_ID = {t.id: t for t in MISSION_TEMPLATES}
