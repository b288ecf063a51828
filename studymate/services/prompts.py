"""
Prompt builders, one per flow. Each returns ``(system_prompt, user_prompt)``.
"""

from studymate.services.schemas import FLASHCARD_TYPES, QUIZ_LENGTH, QUIZ_OPTIONS


def _join(items, sep=", "):
    return sep.join(str(i) for i in (items or []))


def essay_feedback_prompts(req):
    system_prompt = """
You are an AI essay feedback assistant.

Return ONLY VALID JSON, no markdown, no commentary.

The JSON MUST include:
- grammarScore (0-100)
- readabilityScore (0-100)
- claritySuggestions (string)
- structuralSuggestions (string)
- toneAnalysis (string)
- correctedRewrite (string)

NEVER leave a field blank. If unsure, generate a reasonable value.

The JSON must match this structure:
{
  "grammarScore": number,
  "readabilityScore": number,
  "claritySuggestions": "string",
  "structuralSuggestions": "string",
  "toneAnalysis": "string",
  "correctedRewrite": "string"
}
"""
    user_prompt = f"Essay:\n{req.text}"
    return system_prompt, user_prompt


def flashcard_prompts(source_text):
    types = ", ".join(f'"{t}"' for t in FLASHCARD_TYPES)
    system_prompt = f"""
You are an expert educator who generates flashcards from text.

RULES:
- Output MUST be ONLY VALID JSON. No markdown or commentary.
- The JSON object must contain a single key: "flashcards", an array of objects.
- Never leave fields empty.
- "question" must be a clear question.
- "answer" must be short but complete.
- "type" must be one of: {types}.

Example:
{{
  "flashcards": [
    {{"question": "What does mitochondria produce?", "answer": "ATP, the cell's energy currency.", "type": "Q/A"}}
  ]
}}
"""
    user_prompt = f"Generate flashcards from the following text:\n{source_text}"
    return system_prompt, user_prompt


def flashcard_image_prompt():
    system_prompt, _ = flashcard_prompts("")
    return system_prompt, "Generate flashcards from the notes, diagram or text in this image."


def quiz_prompts(req):
    system_prompt = f"""
You are an AI that generates educational multiple-choice quizzes.
Your task is to create a quiz based on the user-provided topic and constraints.

RULES:
- Return ONLY VALID JSON, no markdown or commentary.
- The JSON object must contain a single key: "questions".
- "questions" must be an array of EXACTLY {QUIZ_LENGTH} question objects.
- Each question object MUST have the following fields:
  - "questionText": The question itself (string).
  - "options": An array of EXACTLY {QUIZ_OPTIONS} possible answers (string[]).
  - "correctAnswerIndex": The index (0-{QUIZ_OPTIONS - 1}) of the correct answer in the "options" array (number).
  - "explanation": A concise reason why the correct answer is right (string).
  - "difficulty": The question's difficulty, must be one of "Easy", "Medium", or "Hard" (string). If the user requested 'Any', you can mix difficulties.
- Ensure all fields are populated and valid.
- The questions should be relevant to the provided topic, difficulty, and type.

The JSON output MUST STRICTLY follow this structure:
{{
  "questions": [
    {{
      "questionText": "...",
      "options": ["...", "...", "...", "..."],
      "correctAnswerIndex": 0,
      "explanation": "...",
      "difficulty": "Easy"
    }},
    ... ({QUIZ_LENGTH - 1} more questions)
  ]
}}
"""
    user_prompt = f"""
Generate a quiz with the following properties:
- Topic: "{req.topic}"
- Number of Questions: {QUIZ_LENGTH}
- Difficulty: {req.difficulty}
- Question Type: {req.question_type}
"""
    return system_prompt, user_prompt


def study_plan_prompts(req):
    system_prompt = """
You are an AI study plan generator. You will receive information about a student's profile, tasks, free time, and study goals, and you will generate a personalized study plan.

Generate a personalized study plan with daily sessions, subject priorities (high, medium, low), and estimated time for each session. Also, provide a 7-day timetable outlining the study plan.

Return ONLY VALID JSON, no markdown or commentary, with this structure:
{
  "dailySessions": [
    {"subject": "string", "priority": "high" | "medium" | "low", "estimatedTime": "string"}
  ],
  "weeklyTimetable": "string describing Monday through Sunday"
}
"""
    profile = req.profile
    user_prompt = f"""
Student Profile:
Grade Level: {profile.grade_level}
Subjects: {_join(profile.subjects)}
Exam Dates: {_join(profile.exam_dates) or 'None'}
Weekly Free Hours: {profile.weekly_free_hours}

Tasks:
{_join(req.tasks, sep=chr(10))}

Free Time Slots:
{_join(req.free_hours, sep=chr(10))}

Study Goals:
{req.study_goals}
"""
    return system_prompt, user_prompt


def exam_readiness_prompts(req):
    system_prompt = """
You are a smart productivity coach. Your task is to calculate an "Exam Readiness Score" based on the provided student data.

RULES:
- Return ONLY VALID JSON, no markdown or commentary.
- readinessScore MUST be a number between 0 and 100.
- coachingTip MUST be a short, encouraging, and actionable tip (max 25 words).
- Analyze all inputs to determine the score.
- You must infer the difficulty from the subject name. For example, "Advanced Calculus" is harder than "History 101".
- High hours, consistency, and solved quizzes improve the score. A close deadline and high inferred difficulty negatively impact the score if other factors are low.

The JSON must match this structure:
{
  "readinessScore": number,
  "coachingTip": "string"
}
"""
    user_prompt = f"""
Calculate the exam readiness score based on this data:
- Hours Studied: {req.hours_studied}
- Subject: {req.subject}
- Study Consistency: {req.consistency}
- Quizzes Solved: {req.quizzes_solved}
- Exam Deadline: {req.deadline_proximity}
"""
    return system_prompt, user_prompt


def challenge_question_prompts(req):
    system_prompt = """
You are an AI that creates educational challenge questions.
Generate one question about the provided topic, tailored for the user's specified grade level.
The question should be clear, concise, and suitable for a daily challenge.
Return ONLY VALID JSON with a "question" field.

Example:
{
  "question": "What is the time complexity of a binary search algorithm?"
}
"""
    user_prompt = f"""
Topic: {req.topic}
Grade Level: {req.grade_level}
"""
    return system_prompt, user_prompt


def challenge_answer_prompts(req):
    system_prompt = """
You are an AI that evaluates a user's answer to a question.
Determine if the answer is correct.
Provide brief, encouraging feedback explaining why it's right or wrong.
Return ONLY VALID JSON with "isCorrect" (boolean) and "feedback" (string) fields.

Example for a correct answer:
{
  "isCorrect": true,
  "feedback": "That's correct! You've accurately described the logarithmic time complexity."
}

Example for an incorrect answer:
{
  "isCorrect": false,
  "feedback": "Not quite. Binary search is more efficient than that. Think about how the search space is divided."
}
"""
    user_prompt = f"""
Question: "{req.question}"
User's Answer: "{req.answer}"
"""
    return system_prompt, user_prompt


def motivation_prompts():
    system_prompt = """
You are a motivational coach.
Generate a short, encouraging message to help a student stay focused during a study session.
The message should be no more than 20 words.
Return ONLY VALID JSON of the shape: { "message": "Your motivational quote here." }
Do not include any other text or markdown.
"""
    user_prompt = "Give me a motivational nudge for my focus session."
    return system_prompt, user_prompt
