"""
Medical reference vocabulary: the allergy groups and chronic conditions a
user may select. Catalog authors use the same labels in allergyWarnings and
conditionWarnings, since profile matching is exact (case-insensitive).
"""

from typing import Dict, List

from .models import UserProfile

CHRONIC_CONDITIONS = (
    # Cardiovascular
    'Hypertension (High Blood Pressure)',
    'Hypotension (Low Blood Pressure)',
    'Coronary Artery Disease',
    'Heart Failure',
    'Atrial Fibrillation',
    'Arrhythmia',
    'History of Myocardial Infarction (Heart Attack)',
    'Deep Vein Thrombosis (DVT)',
    'Peripheral Artery Disease',
    'Stroke / TIA',

    # Metabolic & endocrine
    'Diabetes Type 1',
    'Diabetes Type 2',
    'Gestational Diabetes',
    'Hypothyroidism',
    'Hyperthyroidism',
    'Gout',
    'PCOS/PCOD',
    'Obesity',
    'High Cholesterol (Hyperlipidemia)',
    "Addison's Disease",
    "Cushing's Syndrome",

    # Respiratory
    'Asthma',
    'COPD (Chronic Obstructive Pulmonary Disease)',
    'Chronic Bronchitis',
    'Emphysema',
    'Cystic Fibrosis',
    'Tuberculosis (Active/History)',
    'Sleep Apnea',

    # Gastrointestinal
    'GERD (Acid Reflux)',
    'Peptic Ulcer Disease',
    'Gastritis',
    'IBS (Irritable Bowel Syndrome)',
    "IBD (Crohn's Disease)",
    'Ulcerative Colitis',
    'Liver Cirrhosis',
    'Fatty Liver Disease',
    'Hepatitis B',
    'Hepatitis C',
    'Gallstones',
    'Pancreatitis',
    'Celiac Disease',

    # Renal
    'Chronic Kidney Disease (Stage 1-2)',
    'Chronic Kidney Disease (Stage 3-5)',
    'Kidney Stones',
    'Nephrotic Syndrome',
    'Polycystic Kidney Disease',

    # Neurological & psychiatric
    'Migraine',
    'Epilepsy / Seizures',
    "Parkinson's Disease",
    "Alzheimer's / Dementia",
    'Multiple Sclerosis',
    'Depression',
    'Anxiety Disorder',
    'Bipolar Disorder',
    'Schizophrenia',
    'Insomnia',
    'Neuropathy',

    # Hematological
    'Anemia (Iron Deficiency)',
    'Pernicious Anemia (B12 Deficiency)',
    'Thalassemia',
    'Sickle Cell Anemia',
    'Hemophilia',
    'G6PD Deficiency',
    'Bleeding Disorders',

    # Musculoskeletal & autoimmune
    'Osteoarthritis',
    'Rheumatoid Arthritis',
    'Osteoporosis',
    'Lupus (SLE)',
    'Psoriatic Arthritis',
    'Gouty Arthritis',
    'Fibromyalgia',

    # Others
    'Glaucoma',
    'Cataracts',
    'Benign Prostatic Hyperplasia (Enlarged Prostate)',
    'Erectile Dysfunction',
    'Pregnancy',
    'Breastfeeding',
)

DRUG_ALLERGIES = (
    # Penicillins
    'Penicillins',
    'Amoxicillin',
    'Ampicillin',
    'Augmentin',

    # Cephalosporins
    'Cephalosporins (General)',
    'Cephalexin (Keflex)',
    'Cefixime',
    'Cefuroxime',

    # Sulfonamides
    'Sulfa Drugs (Sulfonamides)',
    'Bactrim / Septra',

    # Macrolides
    'Macrolides (General)',
    'Azithromycin',
    'Erythromycin',
    'Clarithromycin',

    # Quinolones
    'Fluoroquinolones',
    'Ciprofloxacin',
    'Levofloxacin',

    # Other antibiotics
    'Tetracyclines',
    'Doxycycline',
    'Vancomycin',
    'Metronidazole',

    # NSAIDs
    'NSAIDs (General)',
    'Aspirin (Salicylates)',
    'Ibuprofen',
    'Diclofenac',
    'Naproxen',
    'Aceclofenac',

    # Opioids
    'Opioids (General)',
    'Morphine',
    'Codeine',
    'Tramadol',
    'Fentanyl',

    # Anticonvulsants
    'Anticonvulsants (General)',
    'Phenytoin',
    'Carbamazepine',
    'Lamotrigine',

    # Miscellaneous
    'ACE Inhibitors (Lisinopril, Enalapril)',
    'ARBs (Telmisartan, Losartan)',
    'Statins (Atorvastatin, Rosuvastatin)',
    'Metformin',
    'Insulin',
    'Contrast Dye (Iodine)',
    'Local Anesthetics (Lidocaine)',
    'General Anesthesia',
    'Latex',
    'Adhesive Tape',
    'Soy',
    'Peanut',
    'Egg Protein (Vaccines)',
)

_CONDITION_KEYS = {condition.lower() for condition in CHRONIC_CONDITIONS}
_ALLERGY_KEYS = {allergy.lower() for allergy in DRUG_ALLERGIES}


def search_conditions(query: str) -> List[str]:
    """Chronic conditions containing the query, case-insensitive"""
    if not query:
        return list(CHRONIC_CONDITIONS)
    lower_query = query.lower()
    return [condition for condition in CHRONIC_CONDITIONS if lower_query in condition.lower()]


def search_allergies(query: str) -> List[str]:
    """Drug allergies containing the query, case-insensitive"""
    if not query:
        return list(DRUG_ALLERGIES)
    lower_query = query.lower()
    return [allergy for allergy in DRUG_ALLERGIES if lower_query in allergy.lower()]


def is_valid_condition(condition: str) -> bool:
    return condition.lower() in _CONDITION_KEYS


def is_valid_allergy(allergy: str) -> bool:
    return allergy.lower() in _ALLERGY_KEYS


def unknown_profile_entries(profile: UserProfile) -> Dict[str, List[str]]:
    """
    Profile labels outside the reference vocabulary. Such labels can never
    match a catalog warning written with the standard labels.
    """
    return {
        'allergies': sorted(a for a in profile.allergies if not is_valid_allergy(a)),
        'chronic_conditions': sorted(c for c in profile.chronic_conditions if not is_valid_condition(c)),
    }
