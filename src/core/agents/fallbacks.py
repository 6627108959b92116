# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Deterministic responses used when the model is unavailable or its output is rejected.

Every response is built from the session context only, with zero model
calls, and always mentions the session's topic or concern so a degraded
turn still reads as part of the same conversation.

The default plans described by the planner and assessment fallbacks are
the same lists the router seeds through the creation tools, so the text
and the stored items agree.
"""

from typing import Any

from src.core.agents.categories import detect_subject_category, detect_therapy_category
from src.core.agents.variants import AgentVariant


def default_concepts(topic: str, response_style: str = "detailed") -> list[dict[str, Any]]:
    """Default concept map for a topic.

    Args:
        topic: Learning topic.
        response_style: "concise" yields five concepts, anything else seven.

    Returns:
        Concept entries in the create_concept_map argument shape.
    """
    if response_style == "concise":
        entries = [
            (f"{topic} Basics", "Core principles"),
            ("Key Methods", "Essential approaches"),
            ("Applications", "Real-world uses"),
            ("Best Practices", "Proven strategies"),
            ("Advanced Topics", "Next-level concepts"),
        ]
    else:
        entries = [
            (f"{topic} Fundamentals", "Core principles and basic definitions"),
            ("Historical Context", "Origins and evolution over time"),
            ("Key Methodologies", "Essential approaches and frameworks"),
            ("Core Components", "Main building blocks and architecture"),
            ("Practical Applications", "Real-world use cases and implementations"),
            ("Best Practices", "Proven strategies and common pitfalls"),
            ("Advanced Techniques", "Cutting-edge approaches and future trends"),
        ]
    return [
        {"name": name, "description": description, "order_index": index}
        for index, (name, description) in enumerate(entries, start=1)
    ]


def default_tasks(topic: str, response_style: str = "detailed") -> list[dict[str, Any]]:
    """Default practice tasks for a topic.

    Args:
        topic: Learning topic.
        response_style: "concise" yields four tasks, anything else six.

    Returns:
        Task entries in the create_practice_tasks argument shape.
    """
    if response_style == "concise":
        entries = [
            ("Foundation Quiz", "Test basic understanding"),
            ("Hands-on Exercise", "Apply core concepts"),
            ("Case Analysis", "Review real examples"),
            ("Implementation Task", "Create something practical"),
        ]
    else:
        entries = [
            ("Foundation Assessment", "Analyze real-world scenarios for key principles"),
            ("Comparative Analysis", "Compare different approaches and evaluate effectiveness"),
            ("Implementation Project", "Design and create your own solution"),
            ("Case Study Review", "Examine successful implementations and extract lessons"),
            ("Teaching Exercise", "Explain concepts to demonstrate understanding"),
            ("Strategic Planning", "Develop comprehensive strategy for hypothetical project"),
        ]
    return [
        {"title": title, "description": f"{description} ({topic})"}
        for title, description in entries
    ]


def default_goals(concern: str) -> list[dict[str, Any]]:
    """Default therapeutic goals for a primary concern."""
    category = detect_therapy_category(concern).category
    entries = [
        ("Immediate Coping", f"Develop healthy coping strategies for {concern}"),
        ("Cognitive Restructuring", "Identify and challenge unhelpful thought patterns"),
        ("Behavioral Activation", "Engage in meaningful activities despite difficulties"),
        ("Skill Building", "Learn specific CBT techniques for long-term management"),
        ("Relapse Prevention", "Create sustainable strategies for ongoing well-being"),
    ]
    return [
        {"title": title, "description": description, "category": category, "priority": priority}
        for priority, (title, description) in zip((1, 1, 2, 2, 3), entries)
    ]


def default_exercises(concern: str) -> list[dict[str, Any]]:
    """Default therapeutic exercises for a primary concern."""
    entries = [
        ("Thought Record", f"Monitor and examine thoughts related to {concern}", "worksheet"),
        ("Behavioral Experiment", "Test negative predictions in safe, structured way", "behavioral"),
        ("Mindful Breathing", "Use breathing techniques for immediate relief", "breathing"),
        ("Activity Scheduling", "Plan pleasant and meaningful activities daily", "behavioral"),
        ("Cognitive Challenge Worksheet", "Practice questioning unhelpful thoughts", "worksheet"),
        ("Progress Tracking Journal", "Monitor mood, thoughts, and behavioral changes", "journaling"),
    ]
    return [
        {"title": title, "description": description, "exercise_type": exercise_type}
        for title, description, exercise_type in entries
    ]


def _learning_plan(context: dict[str, Any]) -> str:
    topic = context.get("topic") or "this topic"
    teaching_style = context.get("teaching_style") or "balanced"
    response_style = context.get("response_style") or "detailed"
    category = detect_subject_category(topic)
    concepts = default_concepts(topic, response_style)
    tasks = default_tasks(topic, response_style)

    scope = "focused" if response_style == "concise" else "comprehensive"
    concept_lines = "\n".join(f"- **{c['name']}**: {c['description']}" for c in concepts)
    task_lines = "\n".join(
        f"{index}. **{t['title']}**: {t['description'].rsplit(' (', 1)[0]}"
        for index, t in enumerate(tasks, start=1)
    )

    return (
        f"## 🎯 Learning Plan for {topic}\n\n"
        f"I've created a {scope} learning plan for {topic} with {teaching_style} approach.\n"
        f"📚 **Subject Category**: {category.category_name}\n\n"
        f"### 📋 Concept Map ({len(concepts)} concepts created)\n{concept_lines}\n\n"
        f"### ✅ Practice Tasks ({len(tasks)} tasks created)\n{task_lines}\n\n"
        f"### 🚀 Ready to Start\n"
        f"Your learning plan is now in the sidebar under **{category.category_name}**. "
        "Let's begin!"
    )


def _teaching(user_message: str, context: dict[str, Any]) -> str:
    topic = context.get("topic") or "this topic"
    pending = [c for c in context.get("concepts", []) if not c.get("is_completed")]
    message = user_message.lower()

    if pending:
        concept = pending[0]
        return (
            f"Let's keep going with {topic}! 🎯\n\n"
            f"**Next up: {concept['name']}**\n"
            f"{concept.get('description') or 'This builds on what we covered so far.'}\n\n"
            "Here's how we'll approach it:\n"
            "- I'll explain the core idea with a concrete example\n"
            "- You'll try a short exercise to apply it\n"
            "- We'll review your answer together before moving on\n\n"
            f"What do you already know about {concept['name']}?"
        )

    if "learn" in message and topic.lower() in message:
        return (
            f"Welcome to your {topic} learning journey! 🎯\n\n"
            "I'm your AI tutor, and I'll guide you through a balanced mix of "
            "understanding and practice. Your concept map is in the sidebar, and "
            "each concept follows the same pattern:\n"
            "- Clear explanation with examples\n"
            "- Practical exercises to reinforce learning\n"
            "- Hands-on tasks to build real skills\n\n"
            f"What would you like me to explain first about {topic}?"
        )

    return (
        f"I understand you want to learn about {topic}. Let me help you with that!\n\n"
        "Here's what I can do:\n"
        "- Explain key concepts with practical examples\n"
        "- Create hands-on tasks to practice your skills\n"
        "- Guide you through the learning process step by step\n\n"
        f"What specific aspect of {topic} would you like to start with?"
    )


def _assessment_plan(context: dict[str, Any]) -> str:
    concern = context.get("primary_concern") or "your concern"
    therapy_style = context.get("therapy_style") or "supportive"
    category = detect_therapy_category(concern)
    goals = default_goals(concern)
    exercises = default_exercises(concern)

    goal_lines = "\n".join(f"- **{g['title']}**: {g['description']}" for g in goals)
    exercise_lines = "\n".join(
        f"{index}. **{x['title']}**: {x['description']}"
        for index, x in enumerate(exercises, start=1)
    )

    return (
        f"## 🧠 CBT Assessment for {concern}\n\n"
        "I've completed your initial CBT assessment and created a personalized "
        f"therapy plan with {therapy_style} approach.\n"
        f"📚 **Focus Area**: {category.category_name}\n\n"
        f"### 📋 Therapeutic Goals ({len(goals)} goals created)\n{goal_lines}\n\n"
        f"### ✅ CBT Exercises ({len(exercises)} exercises created)\n{exercise_lines}\n\n"
        "### 🚀 Ready to Begin\n"
        "Your personalized CBT plan is now available. Remember, this is educational "
        "guidance to complement professional support.\n\n"
        "**Important**: This is educational CBT guidance, not professional therapy. "
        "Please consider seeking professional help for ongoing support with your "
        "mental health concerns."
    )


def _therapy(context: dict[str, Any]) -> str:
    concern = context.get("primary_concern") or "what you're going through"
    pending = [g for g in context.get("goals", []) if not g.get("is_completed")]

    focus = (
        f"One of the goals we set together is **{pending[0]['title']}**. "
        "Would you like to work on that today, or is something else on your mind?"
        if pending
        else "What feels most important to talk about right now?"
    )

    return (
        f"Thank you for sharing that with me. Working through {concern} takes "
        "courage, and it's okay to take this one step at a time.\n\n"
        "Let's slow down for a moment:\n"
        "- What situation has been on your mind most recently?\n"
        "- What thoughts went through your head when it happened?\n"
        "- How did you feel, and what did you do next?\n\n"
        f"{focus}"
    )


def _restructuring(context: dict[str, Any]) -> str:
    concern = context.get("primary_concern") or "the situation you're facing"
    return (
        "Let's work through this together using the ABCDE framework.\n\n"
        "- **A - Activating event**: What exactly happened?\n"
        "- **B - Beliefs**: What thoughts went through your mind?\n"
        "- **C - Consequences**: How did you feel and what did you do?\n"
        "- **D - Disputation**: What evidence supports or challenges those thoughts?\n"
        "- **E - Effective beliefs**: What's a more balanced way to see it?\n\n"
        f"Start with a recent moment connected to {concern}: what was the "
        "activating event?"
    )


def create_simple_response(
    variant: AgentVariant,
    user_message: str,
    context: dict[str, Any],
) -> str:
    """Build the deterministic response for an agent variant.

    Args:
        variant: Agent whose voice the response is written in.
        user_message: Message the agent was asked to answer.
        context: Freshly assembled session context for the agent.

    Returns:
        Topical response text without the agent header.
    """
    if variant is AgentVariant.PLANNER:
        return _learning_plan(context)
    if variant is AgentVariant.TEACHER:
        return _teaching(user_message, context)
    if variant is AgentVariant.ASSESSMENT:
        return _assessment_plan(context)
    if variant is AgentVariant.COGNITIVE_RESTRUCTURING:
        return _restructuring(context)
    return _therapy(context)
