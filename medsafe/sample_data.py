"""
Built-in demonstration catalog, used when no catalog source is configured.
Documents follow the drug store's camelCase layout.
"""

from typing import List

from .catalog import StaticCatalogSource
from .models import DrugRecord

SAMPLE_DRUG_DOCUMENTS = [
    {
        'id': 'paracetamol',
        'displayName': 'Paracetamol',
        'brandNames': ['Crocin', 'Calpol', 'Dolo 650'],
        'category': 'Analgesic',
        'isCombination': False,
        'activeIngredients': [{'name': 'Paracetamol', 'strength': '500mg'}],
        'allergyWarnings': [],
        'conditionWarnings': ['Liver Cirrhosis', 'Fatty Liver Disease'],
        'drugInteractions': [
            {'drugName': 'Warfarin', 'severity': 'moderate',
             'description': 'Regular use may raise INR. Monitor closely.'},
        ],
        'foodInteractions': [
            {'food': 'Alcohol', 'severity': 'avoid',
             'description': 'Increases the risk of liver damage.'},
        ],
    },
    {
        'id': 'ibuprofen',
        'displayName': 'Ibuprofen',
        'brandNames': ['Brufen', 'Advil'],
        'category': 'NSAID',
        'isCombination': False,
        'activeIngredients': [{'name': 'Ibuprofen', 'strength': '400mg'}],
        'allergyWarnings': ['NSAIDs (General)', 'Ibuprofen'],
        'conditionWarnings': ['Peptic Ulcer Disease', 'Chronic Kidney Disease (Stage 3-5)', 'Asthma'],
        'drugInteractions': [
            {'drugName': 'Warfarin', 'severity': 'severe',
             'description': 'Increased risk of bleeding.'},
            {'drugName': 'Aspirin', 'severity': 'moderate',
             'description': 'May reduce the antiplatelet effect of aspirin.'},
        ],
        'foodInteractions': [
            {'food': 'Alcohol', 'severity': 'caution',
             'description': 'Raises the risk of stomach bleeding.'},
        ],
    },
    {
        'id': 'combiflam',
        'displayName': 'Combiflam',
        'brandNames': ['Combiflam'],
        'category': 'NSAID + Analgesic',
        'isCombination': True,
        'activeIngredients': [
            {'name': 'Ibuprofen', 'strength': '400mg'},
            {'name': 'Paracetamol', 'strength': '325mg'},
        ],
        'allergyWarnings': ['NSAIDs (General)', 'Ibuprofen'],
        'conditionWarnings': ['Peptic Ulcer Disease', 'Liver Cirrhosis', 'Asthma'],
        'drugInteractions': [
            {'drugName': 'Warfarin', 'severity': 'severe',
             'description': 'Increased risk of bleeding.'},
        ],
        'foodInteractions': [
            {'food': 'Alcohol', 'severity': 'avoid',
             'description': 'Raises the risk of liver damage and stomach bleeding.'},
        ],
    },
    {
        'id': 'aspirin',
        'displayName': 'Aspirin',
        'brandNames': ['Ecosprin', 'Disprin'],
        'category': 'Antiplatelet',
        'isCombination': False,
        'allergyWarnings': ['NSAIDs (General)', 'Aspirin (Salicylates)'],
        'conditionWarnings': ['Peptic Ulcer Disease', 'Bleeding Disorders'],
        'drugInteractions': [
            {'drugName': 'Warfarin', 'severity': 'severe',
             'description': 'Combined anticoagulant and antiplatelet effect; high bleeding risk.'},
            {'drugName': 'Ibuprofen', 'severity': 'moderate',
             'description': 'Ibuprofen may block the cardioprotective effect of aspirin.'},
        ],
        'foodInteractions': [],
    },
    {
        'id': 'warfarin',
        'displayName': 'Warfarin',
        'brandNames': ['Coumadin', 'Warf'],
        'category': 'Anticoagulant',
        'isCombination': False,
        'allergyWarnings': [],
        'conditionWarnings': ['Bleeding Disorders', 'Pregnancy'],
        'drugInteractions': [
            {'drugName': 'Aspirin', 'severity': 'severe',
             'description': 'High bleeding risk.'},
            {'drugName': 'Ibuprofen', 'severity': 'severe',
             'description': 'NSAIDs increase bleeding risk.'},
            {'drugName': 'Amoxicillin', 'severity': 'moderate',
             'description': 'Antibiotics may alter warfarin metabolism.'},
        ],
        'foodInteractions': [
            {'food': 'Leafy green vegetables', 'severity': 'limit',
             'description': 'Vitamin K lowers the effect of warfarin; keep intake steady.'},
        ],
    },
    {
        'id': 'metformin',
        'displayName': 'Metformin',
        'brandNames': ['Glycomet', 'Glucophage'],
        'category': 'Antidiabetic',
        'isCombination': False,
        'allergyWarnings': ['Metformin'],
        'conditionWarnings': ['Chronic Kidney Disease (Stage 3-5)', 'Liver Cirrhosis'],
        'drugInteractions': [
            {'drugName': 'Ibuprofen', 'severity': 'mild',
             'description': 'NSAIDs may reduce kidney function and affect metformin elimination.'},
        ],
        'foodInteractions': [
            {'food': 'Alcohol', 'severity': 'avoid',
             'description': 'Raises the risk of lactic acidosis.'},
        ],
    },
    {
        'id': 'amoxicillin',
        'displayName': 'Amoxicillin',
        'brandNames': ['Novamox', 'Amoxil'],
        'category': 'Antibiotic',
        'isCombination': False,
        'allergyWarnings': ['Penicillins', 'Amoxicillin'],
        'conditionWarnings': [],
        'drugInteractions': [
            {'drugName': 'Warfarin', 'severity': 'moderate',
             'description': 'May increase the anticoagulant effect.'},
        ],
        'foodInteractions': [],
    },
    {
        'id': 'augmentin',
        'displayName': 'Amoxicillin + Clavulanic Acid',
        'brandNames': ['Augmentin', 'Clavam'],
        'category': 'Antibiotic',
        'isCombination': True,
        'activeIngredients': [
            {'name': 'Amoxicillin', 'strength': '500mg'},
            {'name': 'Clavulanic Acid', 'strength': '125mg'},
        ],
        'allergyWarnings': ['Penicillins', 'Amoxicillin', 'Augmentin'],
        'conditionWarnings': ['Liver Cirrhosis'],
        'drugInteractions': [
            {'drugName': 'Warfarin', 'severity': 'moderate',
             'description': 'May increase the anticoagulant effect.'},
        ],
        'foodInteractions': [],
    },
    {
        'id': 'cetirizine',
        'displayName': 'Cetirizine',
        'brandNames': ['Zyrtec', 'Cetzine'],
        'category': 'Antihistamine',
        'isCombination': False,
        'allergyWarnings': [],
        'conditionWarnings': ['Chronic Kidney Disease (Stage 3-5)'],
        'drugInteractions': [],
        'foodInteractions': [
            {'food': 'Alcohol', 'severity': 'caution',
             'description': 'May increase drowsiness.'},
        ],
    },
]


def sample_catalog_source() -> StaticCatalogSource:
    return StaticCatalogSource(SAMPLE_DRUG_DOCUMENTS, strict=True)


def sample_catalog() -> List[DrugRecord]:
    """Validated records of the demonstration catalog"""
    return sample_catalog_source().load()
