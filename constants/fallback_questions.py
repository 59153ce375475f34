from typing import List
from models.quiz import Question

# Used whenever generation fails. Order and content must stay fixed.
_FALLBACK = [
    {"question": "What is the Kakapo?", "options": {"A": "A type of owl", "B": "A flightless parrot", "C": "A bat species", "D": "A lizard"}, "correct_answer": "B", "explanation": "The Kakapo is the world's only flightless parrot, native to New Zealand."},
    {"question": "Where are Kakapos found in the wild?", "options": {"A": "Australia", "B": "New Zealand", "C": "Hawaii", "D": "Madagascar"}, "correct_answer": "B", "explanation": "Kakapos are endemic to New Zealand."},
    {"question": "What do Kakapos primarily eat?", "options": {"A": "Fish", "B": "Small mammals", "C": "Plants, fruits, and seeds", "D": "Insects only"}, "correct_answer": "C", "explanation": "Kakapos are herbivores."},
    {"question": "How do male Kakapos attract females?", "options": {"A": "Building nests", "B": "Booming sounds", "C": "Colorful displays", "D": "Dancing"}, "correct_answer": "B", "explanation": "Males create bowl-shaped depressions and emit booming calls."},
    {"question": "What is the conservation status of Kakapos?", "options": {"A": "Least Concern", "B": "Endangered", "C": "Critically Endangered", "D": "Extinct"}, "correct_answer": "C", "explanation": "Kakapos are Critically Endangered."},
    {"question": "When are Kakapos most active?", "options": {"A": "Day", "B": "Dawn", "C": "Night", "D": "Dusk"}, "correct_answer": "C", "explanation": "Kakapos are nocturnal."},
    {"question": "Main threat to Kakapos?", "options": {"A": "Climate change", "B": "Introduced predators", "C": "Disease", "D": "Habitat loss"}, "correct_answer": "B", "explanation": "Introduced predators are the biggest threat."},
    {"question": "How much does an adult Kakapo weigh?", "options": {"A": "500g", "B": "1kg", "C": "2-4kg", "D": "10kg"}, "correct_answer": "C", "explanation": "Adults weigh 2-4 kg."},
    {"question": "How long can Kakapos live?", "options": {"A": "10-20 years", "B": "30-40 years", "C": "60-90 years", "D": "100+ years"}, "correct_answer": "C", "explanation": "Kakapos can live 60-90 years."},
    {"question": "Why can't Kakapos fly?", "options": {"A": "Too heavy", "B": "Evolved without predators", "C": "Wings damaged", "D": "Prefer walking"}, "correct_answer": "B", "explanation": "They evolved without natural predators."},
]

FALLBACK_QUESTIONS: List[Question] = [Question.from_generated(q) for q in _FALLBACK]


def get_fallback_questions() -> List[Question]:
    return list(FALLBACK_QUESTIONS)
