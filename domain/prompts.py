ANALYSIS_SYSTEM_PROMPT = "You are a strict resume reviewer returning only valid JSON."

AI_RESPONSE_FORMAT = """
interface Feedback {
  overallScore: number; //max 100
  ATS: {
    score: number; //rate based on ATS suitability
    tips: {
      type: "good" | "improve";
      tip: string; //give 3-4 tips
    }[];
  };
  toneAndStyle: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string; //make it a short "title" for the actual explanation
      explanation: string; //explain in detail here
    }[]; //give 3-4 tips
  };
  content: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string; //make it a short "title" for the actual explanation
      explanation: string; //explain in detail here
    }[]; //give 3-4 tips
  };
  structure: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string; //make it a short "title" for the actual explanation
      explanation: string; //explain in detail here
    }[]; //give 3-4 tips
  };
  skills: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string; //make it a short "title" for the actual explanation
      explanation: string; //explain in detail here
    }[]; //give 3-4 tips
  };
}
"""

ANALYSIS_PROMPT = """You are an expert in ATS (Applicant Tracking System) and resume analysis.
Please analyze and rate this resume and suggest how to improve it.
The rating can be low if the resume is bad.
Be thorough and detailed. Don't be afraid to point out any mistakes or areas for improvement.
If there is a lot to improve, don't hesitate to give low scores. This is to help the user to improve their resume.
If available, use the job description for the job the user is applying to to give more detailed feedback.
If provided, take the job description into consideration.
The company the user is applying to is: {org}
The job title is: {role}
The job description is: {role_description}
Provide the feedback using the following format:
{response_format}
Return the analysis as a JSON object, without any other text and without the backticks.
Do not include any other text or comments.
"""

CHAT_SYSTEM_PROMPT = (
    "You are a helpful assistant specializing in resume writing, job search, career advice, "
    "and interview preparation. Provide concise, actionable advice."
)


def prepare_instructions(role: str, role_description: str, org: str = "") -> str:
    return ANALYSIS_PROMPT.format(
        org=org or "not specified",
        role=role or "not specified",
        role_description=role_description or "not provided",
        response_format=AI_RESPONSE_FORMAT,
    )
