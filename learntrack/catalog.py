"""
The fixed curriculum: fifteen IFRS 17 training modules.
"""

TOTAL_MODULES = 15
FIRST_MODULE_ID = 1
LAST_MODULE_ID = TOTAL_MODULES

MODULE_TITLES: dict[int, str] = {
    1: "Introduction & Fundamental Principles of IFRS 17",
    2: "Combination and Separation of Insurance Contracts",
    3: "Level of Aggregation",
    4: "General Measurement Model (GMM)",
    5: "Premium Allocation Approach (PAA)",
    6: "Variable Fee Approach (VFA)",
    7: "Contractual Service Margin (CSM)",
    8: "Risk Adjustment",
    9: "Discount Rates and Time Value of Money",
    10: "Initial Recognition and Measurement",
    11: "Subsequent Measurement",
    12: "Presentation and Disclosure",
    13: "Transition Requirements",
    14: "Implementation Challenges",
    15: "Case Studies and Practical Applications",
}


def is_valid_module_id(module_id: object) -> bool:
    # bool is an int subclass; True must not pass as module 1.
    return (
        isinstance(module_id, int)
        and not isinstance(module_id, bool)
        and FIRST_MODULE_ID <= module_id <= LAST_MODULE_ID
    )
