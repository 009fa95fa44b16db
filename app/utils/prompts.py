# app/utils/prompts.py

from app.utils.taxonomy import EXERCISES_BY_GROUP, MuscleGroup

SYSTEM_PROMPT = (
    "You are an expert fitness assistant that extracts workout data from "
    "transcriptions in English, Egyptian Arabic, or mixed language. You must "
    "correctly distinguish between similar-sounding exercises (e.g., 'lateral "
    "raises' are a SHOULDER exercise, NOT 'lat pulldown' which is a BACK "
    "exercise). Always respond with valid JSON only. Never output duplicate "
    "exercises. Always use proper English exercise names."
)

DISAMBIGUATION = """\
These exercises are commonly confused in Arabic speech recognition. Pay VERY careful attention:

- "لاتيرال رايز" / "lateral raise" / "رفع جانبي" -> "Lateral Raises" (Shoulders, side delt raise with dumbbells). This is NOT "Lat Pulldown".
- "لات بول داون" / "lat pull down" / "سحب" -> "Lat Pulldown" (Back, pulling a bar down to chest). This is NOT "Lateral Raises".
- "بوش" / "push" / "بوش اب" -> could mean "Push-ups" or refer to a push workout
- "بنش" / "bench" -> "Bench Press" (Chest)
- "فلاي" / "fly" -> "Chest Flyes" (Chest)
- "كيبل فلاي" -> "Cable Flyes" (Chest)
- "تراي" / "ترايسبس" -> Triceps exercises
- "باي" / "بايسبس" -> Biceps exercises
- "ديد ليفت" / "ديدليفت" -> "Deadlift" (Back)
- "سكوات" -> "Squats" (Legs)
- "ليج برس" -> "Leg Press" (Legs)
- "شولدر برس" -> "Shoulder Press" (Shoulders)
- "كتف" -> Shoulders exercises
- "ضهر" -> Back exercises
- "صدر" -> Chest exercises
- "رجل" -> Leg exercises"""


def muscle_group_table() -> str:
    lines = []
    for group, exercises in EXERCISES_BY_GROUP.items():
        lines.append(f"{group.value}: {', '.join(exercises)}")
    return "\n".join(lines)


def build_extraction_prompt(transcription: str) -> str:
    groups = ", ".join(g.value for g in MuscleGroup)
    return f"""\
The user may speak in pure English, pure Egyptian Arabic, or a mix (English
exercise names with Arabic sentence structure).

TRANSCRIPTION:
{transcription}

TASK:
1. Decide whether this transcription is about a gym workout or fitness exercise.
2. If it is NOT about gym/fitness, return: {{"not_gym_related": true}}
3. If it IS about gym/fitness, translate it to English and extract every
   exercise mentioned with its sets, reps and weight, and the muscle group it
   primarily targets.

EXERCISE NAME DISAMBIGUATION
{DISAMBIGUATION}

EXERCISE -> MUSCLE GROUP
{muscle_group_table()}

muscle_group MUST be exactly one of: {groups}.
Use "Explosive" for power/conditioning movements.

EXTRACTION RULES
- If weight is not mentioned, use 0
- If sets/reps are not mentioned, use 3 sets and 10 reps
- Exercise names MUST be proper English names (e.g. "Bench Press", not "بنش")
- Each exercise must be a real, specific exercise, not a body part name
- Never output duplicate exercises

Return ONLY valid JSON (no markdown, no explanation):

For gym-related content:
{{"exercises": [{{"name": "String", "muscle_group": "String", "weight": Number, "sets": Number, "reps": Number}}]}}

For non-gym content:
{{"not_gym_related": true}}
"""
