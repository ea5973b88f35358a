from __future__ import annotations

SEED_SERVICES: list[dict] = [
    {
        "id": "svc-1",
        "name": "Annual Tax Filing",
        "short_description": "Complete yearly tax filing service for individuals and businesses",
        "description": (
            "Analysis of your financial situation, preparation of every required form and "
            "on-time filing of individual or business returns."
        ),
        "category": "tax",
        "price_amount": "5000",
        "price_currency": "INR",
        "billing_type": "one-time",
        "features": [
            "Detailed tax analysis and planning",
            "All required tax forms preparation",
            "Digital and paper filing options",
            "Deduction optimization",
            "Audit protection",
        ],
        "requirements": [
            "Income statements",
            "Previous year's tax returns",
            "Expense receipts",
            "Investment statements",
        ],
        "deliverables": [
            "Completed tax returns",
            "Electronic filing with government",
            "Payment or refund processing",
            "Digital copies of all documents",
        ],
        "estimated_duration": "1-2 weeks",
    },
    {
        "id": "svc-2",
        "name": "Business Registration",
        "short_description": "Complete business setup and registration services",
        "description": (
            "Registration of sole proprietorships through corporations: structure advice, "
            "paperwork and filings handled end to end."
        ),
        "category": "registration",
        "price_amount": "15000",
        "price_currency": "INR",
        "billing_type": "one-time",
        "features": [
            "Business structure consultation",
            "Name availability check",
            "Government registration",
            "Tax ID application",
            "Business licenses coordination",
        ],
        "requirements": [
            "Business owner identification",
            "Proposed business name options",
            "Business address confirmation",
            "Initial investment details",
        ],
        "deliverables": [
            "Business registration certificate",
            "Tax identification numbers",
            "Required licenses and permits",
            "Compliance checklist",
        ],
        "estimated_duration": "3-4 weeks",
    },
    {
        "id": "svc-3",
        "name": "Financial Audit",
        "short_description": "Comprehensive audit services for businesses of all sizes",
        "description": (
            "Independent examination of financial statements and accounting processes, "
            "with findings on reporting accuracy and compliance."
        ),
        "category": "audit",
        "price_amount": "25000",
        "price_currency": "INR",
        "billing_type": "one-time",
        "features": [
            "Risk assessment",
            "Internal controls evaluation",
            "Financial statement examination",
            "Compliance verification",
            "Management letter with recommendations",
        ],
        "requirements": [
            "Financial statements",
            "General ledger access",
            "Transaction records",
            "Previous audit reports (if any)",
            "Company policies documentation",
        ],
        "deliverables": [
            "Audit report",
            "Management letter",
            "Financial statements certification",
            "Presentation of findings",
        ],
        "estimated_duration": "4-6 weeks",
    },
    {
        "id": "svc-4",
        "name": "GST Filing & Compliance",
        "short_description": "Regular GST filing and compliance management",
        "description": (
            "Monthly or quarterly GST filings, reconciliations and compliance tracking "
            "with input tax credit optimization."
        ),
        "category": "tax",
        "price_amount": "3000",
        "price_currency": "INR",
        "billing_type": "monthly",
        "features": [
            "Monthly/quarterly GST returns",
            "Input tax credit optimization",
            "GST reconciliation",
            "Compliance monitoring",
            "Regular updates on GST changes",
        ],
        "requirements": [
            "Purchase and sales invoices",
            "GST registration details",
            "Bank statements",
            "Access to accounting software",
        ],
        "deliverables": [
            "Filed GST returns",
            "Monthly reconciliation reports",
            "Compliance status updates",
            "Tax planning recommendations",
        ],
        "estimated_duration": "Ongoing service",
    },
    {
        "id": "svc-5",
        "name": "Business Consulting",
        "short_description": "Strategic business advisory services",
        "description": (
            "Business analysis, growth opportunities and actionable recommendations "
            "tailored to your goals."
        ),
        "category": "consulting",
        "price_amount": "10000",
        "price_currency": "INR",
        "billing_type": "monthly",
        "features": [
            "Business performance analysis",
            "Strategic planning sessions",
            "Operational efficiency assessment",
            "Growth opportunity identification",
            "Regular strategy meetings",
        ],
        "requirements": [
            "Financial statements",
            "Business objectives",
            "Current business plan",
            "Market information",
            "Operational metrics",
        ],
        "deliverables": [
            "Strategic recommendations report",
            "Implementation roadmap",
            "Monthly performance reviews",
            "Market analysis updates",
        ],
        "estimated_duration": "Ongoing service",
    },
]
